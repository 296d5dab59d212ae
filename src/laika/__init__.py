"""Laika — user account service.

Session-authenticated CRUD over user accounts with owner/admin
authorization, served as a small JSON API.
"""

__version__ = "0.1.0"
