#!/usr/bin/env python3
"""
Laika Quickstart — the account lifecycle in one script.

Signs up a user → logs in → reads and updates itself → tries (and fails)
to make itself admin → deletes itself.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000 (laika serve)
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000"


def main():
    run_id = uuid.uuid4().hex[:6]
    username = f"demo-{run_id}"
    password = "demo-password-123"
    # httpx.Client keeps the session cookie between requests
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    health = resp.json()
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Redis:    {'✓' if health['redis'] == 'ok' else '✗'}")

    # ── Sign up ───────────────────────────────────────────────────
    print("\n1. Signing up...")
    resp = client.post(f"/api/users/{username}", json={
        "username": username,
        "email": f"{username}@laika.gallery",
        "password": password,
    })
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   User: {resp.json()['username']} ({resp.json()['id'][:8]}...)")

    # ── Protected routes need a session ───────────────────────────
    resp = client.get(f"/api/users/{username}")
    print(f"   Read without session → {resp.status_code} ({resp.json()['error']})")

    # ── Log in ────────────────────────────────────────────────────
    print("\n2. Logging in...")
    resp = client.post("/login", json={"username": username, "password": password})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print("   Session cookie set")

    # ── Read + update self ────────────────────────────────────────
    print("\n3. Reading and updating own account...")
    resp = client.get(f"/api/users/{username}")
    print(f"   Email: {resp.json()['email']}")
    resp = client.put(f"/api/users/{username}", json={"email": f"{username}@example.com"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Email now: {resp.json()['email']}")

    # ── Privilege escalation is refused ───────────────────────────
    print("\n4. Trying to become admin...")
    resp = client.put(f"/api/users/{username}", json={"admin": True})
    print(f"   → {resp.status_code} ({resp.json()['detail']})")

    # ── Delete self ───────────────────────────────────────────────
    print("\n5. Deleting account...")
    resp = client.delete(f"/api/users/{username}")
    assert resp.status_code == 200, f"Failed: {resp.text}"
    resp = client.get("/api/me")
    print(f"   Deleted; /api/me → {resp.status_code}")

    print("\nDone.")


if __name__ == "__main__":
    main()
