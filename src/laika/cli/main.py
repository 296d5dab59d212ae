"""Laika CLI — run the server and manage accounts from a shell.

Usage:
    laika serve                                  # Run the API with uvicorn
    laika init-db                                # Create tables (dev/SQLite)
    laika create-admin root root@example.com     # Bootstrap the first admin

Learn: Only an admin can grant `admin` over HTTP, so the very first admin
has to come from somewhere else. create-admin talks to the database
through the same UserService the API uses.
"""

from __future__ import annotations

import asyncio
import sys

import click

from laika import __version__


def _run(coro):
    """Run an async coroutine from a synchronous Click handler."""
    return asyncio.run(coro)


@click.group()
@click.version_option(version=__version__, prog_name="laika")
def main():
    """Laika — user accounts API."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: LAIKA_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: LAIKA_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    from laika.config import settings

    uvicorn.run(
        "laika.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables from the models (use alembic for Postgres)."""
    from laika.db.engine import create_all, engine

    async def _impl():
        await create_all()
        await engine.dispose()

    _run(_impl())
    click.secho("Tables created.", fg="green")


@main.command("create-admin")
@click.argument("username")
@click.argument("email")
@click.password_option(help="Password for the new admin")
def create_admin(username: str, email: str, password: str):
    """Create an admin account (or promote an existing one)."""
    from laika.errors import ValidationFailed

    try:
        promoted = _run(_create_admin_impl(username, email, password))
    except ValidationFailed as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)

    if promoted:
        click.secho(f"Promoted existing user '{username}' to admin.", fg="yellow")
    else:
        click.secho(f"Admin '{username}' created.", fg="green")


async def _create_admin_impl(username: str, email: str, password: str) -> bool:
    """Returns True when an existing user was promoted instead of created."""
    from laika.db.engine import async_session_factory, engine
    from laika.services.user_service import UserService

    try:
        async with async_session_factory() as db:
            svc = UserService(db)
            if await svc.find(username) is not None:
                await svc.update(username, {"admin": True})
                return True
            await svc.create(username=username, email=email, password=password, admin=True)
            return False
    finally:
        await engine.dispose()


if __name__ == "__main__":
    main()
