"""
Mabba - FastAPI Backend Application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import structlog

from app.config import settings
from app.api import (
    auth,
    catalog,
    admin_catalog,
    orders,
    chat,
    notifications,
    payments,
    admin_orders,
    superadmin,
    realtime,
)
from app.webhooks import paystack

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Mabba API", version="1.0.0", paystack_configured=settings.paystack_configured)
    yield
    logger.info("Shutting down Mabba API")


# Create FastAPI application
app = FastAPI(
    title="Mabba",
    description="Celebration gift packages: catalog, orders, payments and support chat",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded files (payment proofs, chat attachments, catalog images)
app.mount("/storage", StaticFiles(directory=settings.storage_path, check_dir=False), name="storage")


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    from sqlalchemy import text
    from app.database import SessionLocal

    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    # Check Redis
    try:
        from app.jobs.celery_app import celery_app
        celery_app.control.ping(timeout=1)
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(chat.router, tags=["Chat"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
app.include_router(payments.router, tags=["Payments"])

# Back office
app.include_router(admin_catalog.router, prefix="/admin/catalog", tags=["Admin Catalog"])
app.include_router(admin_orders.router, prefix="/admin", tags=["Admin"])
app.include_router(superadmin.router, prefix="/admin", tags=["Super Admin"])

# Realtime feeds
app.include_router(realtime.router, tags=["Realtime"])

# Include webhook routers
app.include_router(paystack.router, prefix="/webhooks", tags=["Webhooks"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
