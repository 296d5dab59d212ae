"""Authentication and authorization.

Learn: Authentication is session based: POST /login checks a bcrypt
password and hands out an opaque cookie token backed by a row in the
sessions table. Every request resolves that cookie to a Caller (or None).

Authorization is a separate, pure decision (policy.allow) over the
caller, the target username and the fields the request wants to touch.
"""
