"""
Salesdesk - sales hierarchy, commission and payroll back office

Main FastAPI application with:
- Cookie JWT authentication with a role capability table
- Admin API (settings, approvals, payroll, users)
- Panel API (sales, team, income, recovery, deliveries)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select

from src.api import api_router
from src.auth.middleware import AuthMiddleware
from src.config import settings
from src.db import get_db_context
from src.models import SettingsDomain, User, UserRole
from src.services.errors import ServiceError
from src.services.settings_store import get_settings_row
from src.utils.password import hash_password

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def bootstrap(db) -> None:
    """Create the Super Admin account and default settings documents if missing."""
    result = await db.execute(
        select(User).where(User.role == UserRole.SUPER_ADMIN).limit(1)
    )
    if result.scalar_one_or_none() is None:
        logger.info("Creating Super Admin account...")
        db.add(
            User(
                username=settings.super_admin_username,
                password_hash=hash_password(settings.super_admin_password),
                name="Super Admin",
                role=UserRole.SUPER_ADMIN,
                is_disabled=False,
            )
        )
        await db.flush()
        logger.info(f"Super Admin account created: {settings.super_admin_username}")

    for domain in SettingsDomain:
        await get_settings_row(db, domain)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Salesdesk...")

    async with get_db_context() as db:
        await bootstrap(db)

    logger.info("Salesdesk started successfully!")

    yield

    logger.info("Shutting down Salesdesk...")


app = FastAPI(
    title="Salesdesk",
    description="Sales hierarchy, commission and payroll back office",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

app.add_middleware(AuthMiddleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
