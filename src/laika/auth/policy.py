"""Authorization policy.

Learn: A pure function with no DB or request access, so every rule can be unit
tested in isolation. Rules, first match wins:

1. no caller            → deny
2. caller is admin      → allow anything, including the `admin` field
3. caller is the target → allow, unless the request touches `admin`
4. otherwise            → deny

A target of None means "the whole collection" (GET /api/users), which
only rule 2 can satisfy.
"""

from collections.abc import Iterable
from typing import Optional

from laika.auth.dependencies import Caller

ADMIN_FIELD = "admin"


def allow(
    caller: Optional[Caller],
    target_username: Optional[str],
    requested_fields: Iterable[str] = (),
) -> bool:
    if caller is None:
        return False
    if caller.admin:
        return True
    if target_username is None:
        return False
    return caller.username == target_username and ADMIN_FIELD not in set(requested_fields)


def can_grant_admin(caller: Optional[Caller]) -> bool:
    """Only an existing admin may set the `admin` flag, on create or update."""
    return caller is not None and caller.admin
