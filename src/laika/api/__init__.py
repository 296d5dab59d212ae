"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Authentication for the user routes is applied per route (see
api/users.py) rather than at include_router level, because signup is
open while the rest of the collection is protected, and the policy
needs the path username.
"""

from fastapi import APIRouter

from laika.api.auth import me_router
from laika.api.auth import router as auth_router
from laika.api.health import router as health_router
from laika.api.users import router as users_router

api_router = APIRouter(prefix="/api")
api_router.include_router(users_router, tags=["users"])
api_router.include_router(me_router, tags=["auth"])

# Session routes and health live at the root
root_router = APIRouter()
root_router.include_router(auth_router, tags=["auth"])
root_router.include_router(health_router, tags=["health"])
