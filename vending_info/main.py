import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from vending_info.api import auth, machines, payment_methods, products, reviews, uploads, users
from vending_info.core.config import settings
from vending_info.core.errors import register_exception_handlers
from vending_info.core.limiter import limiter
from vending_info.core.logging_config import CorrelationIdMiddleware, init_application_logging
from vending_info.core.security import SecurityHeadersMiddleware
from vending_info.core.utils.database_helpers import check_database_health
from vending_info.core.utils.file_storage import URL_PREFIX, FileStorage
from vending_info.db.init_db import init_database
from vending_info.db.session import create_db_engine, create_session_factory

logger = logging.getLogger("vending_info.main")


def _check_storage_health() -> Dict[str, Any]:
    """
    Check the health of the rate limiting storage backend.

    Returns dict with storage health status and details.
    """
    if not settings.redis_url:
        return {
            "type": "memory",
            "healthy": True,
            "message": "In-memory storage active",
        }

    try:
        limiter._storage.check()
    except Exception as e:
        logger.warning("Redis health check failed: %s", str(e))
        return {
            "type": "redis",
            "healthy": False,
            "message": "Redis connection failed",
        }
    return {
        "type": "redis",
        "healthy": True,
        "message": "Redis connection successful",
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.engine.dispose()


def create_app(database_url: Optional[str] = None, upload_dir: Optional[str] = None) -> FastAPI:
    """
    Build the application with its own engine, session factory and file storage.

    Tables are created and the payment method catalog seeded before the
    app is returned.
    """
    engine = create_db_engine(database_url or settings.DATABASE_URL)
    init_database(engine)

    storage = FileStorage(upload_dir or settings.UPLOAD_DIR, settings.MAX_UPLOAD_SIZE)
    storage.ensure_directories()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Directory of vending machines, their products, payment methods and reviews",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.file_storage = storage

    # Attach limiter to app.state for access in route decorators
    app.state.limiter = limiter

    # Consistent HTTP 429 responses for rate limit exceeded errors
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    logger.info(
        "Rate limiting initialized with configuration: login=%s, upload=%s, write=%s",
        settings.rate_limit_login_endpoints,
        settings.rate_limit_upload_endpoints,
        settings.rate_limit_write_endpoints,
    )

    # Configure CORS (restrict origins; credentials require explicit origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    # Uploaded media, read-only
    app.mount(URL_PREFIX, StaticFiles(directory=str(storage.root)), name="uploads")

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(machines.router, prefix="/api", tags=["Machines"])
    app.include_router(products.router, prefix="/api/products", tags=["Products"])
    app.include_router(
        payment_methods.router, prefix="/api/payment-methods", tags=["Payment Methods"]
    )
    app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
    app.include_router(uploads.router, prefix="/api/upload", tags=["Uploads"])

    # Health check endpoints
    @app.get("/health")
    def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy"}

    @app.get("/api/health")
    def api_health_check(request: Request, response: Response):
        """
        Detailed health check with database connectivity, rate limiting
        status and version info.
        """
        health_status: Dict[str, Any] = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "version": settings.VERSION,
            "environment": {
                "name": settings.ENVIRONMENT,
                "dev_mode": settings.DEV_MODE,
                "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            },
            "services": {},
        }

        db_health = check_database_health(request.app.state.engine)
        health_status["services"]["database"] = {
            "status": db_health["status"],
            "type": db_health["database_type"],
            "connected": db_health["connected"],
            "table_count": db_health["table_count"],
            "last_error": db_health.get("last_error"),
        }
        if db_health["status"] == "unhealthy":
            health_status["status"] = "unhealthy"
        elif db_health["status"] != "healthy":
            health_status["status"] = "degraded"

        storage_health = _check_storage_health()
        rate_limit_status = "enabled" if limiter.enabled else "disabled"
        if limiter.enabled and not storage_health["healthy"]:
            rate_limit_status = "degraded"
            if health_status["status"] == "healthy":
                health_status["status"] = "degraded"

        health_status["services"]["rate_limiting"] = {
            "status": rate_limit_status,
            "storage": storage_health,
            "configuration": {
                "login_endpoints": settings.rate_limit_login_endpoints,
                "upload_endpoints": settings.rate_limit_upload_endpoints,
                "write_endpoints": settings.rate_limit_write_endpoints,
            },
        }

        if health_status["status"] == "unhealthy":
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return health_status

    return app


# Initialize structured logging
init_application_logging()

app = create_app()
