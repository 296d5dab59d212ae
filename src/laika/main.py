"""FastAPI application factory.

Learn: App factory pattern: create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis, database engine).
Middleware, CORS, exception handlers and routers are all registered here.

Every JSON body, success or error, goes out as
`application/json; charset=utf-8` (see laika.responses).
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from laika import __version__
from laika.api import api_router, root_router
from laika.config import settings
from laika.errors import LaikaError, Unauthenticated, ValidationFailed
from laika.log import configure_logging
from laika.responses import UTF8JSONResponse

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    logger.info(
        "laika.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from laika.db.redis import close_redis, init_redis
    try:
        await init_redis()
        logger.info("laika.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; only rate limiting needs it
        logger.warning("laika.redis_unavailable", error=str(e))

    yield

    logger.info("laika.shutdown")
    await close_redis()

    from laika.db.engine import engine
    await engine.dispose()


# ── Exception handlers ───────────────────────────────────


async def laika_error_handler(request: Request, exc: LaikaError) -> UTF8JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Session"}
    if exc.status_code >= 500:
        logger.error("request.failed", error=exc.error, detail=exc.message)
    return UTF8JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> UTF8JSONResponse:
    """Reshape FastAPI's 422 into the same 400 body services raise."""
    errors: dict[str, dict] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query")]
        field = ".".join(loc) or "body"
        kind = "required" if err.get("type") == "missing" else err.get("type", "invalid")
        errors[field] = {"kind": kind, "path": field, "message": err.get("msg", "")}
    return await laika_error_handler(request, ValidationFailed(errors))


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> UTF8JSONResponse:
    return UTF8JSONResponse(
        {"error": "http_error", "detail": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Laika Accounts API",
        description="User accounts with session auth and owner/admin authorization",
        version=__version__,
        lifespan=lifespan,
        default_response_class=UTF8JSONResponse,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from laika.middleware.rate_limit import RateLimitMiddleware
    from laika.middleware.request_id import RequestIdMiddleware
    from laika.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LaikaError, laika_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(api_router)
    app.include_router(root_router)

    return app


# Default app instance (used by uvicorn: laika.main:app)
app = create_app()
