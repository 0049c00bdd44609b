"""Admin API router aggregation."""

from fastapi import APIRouter

from src.api.admin.change_requests import router as change_requests_router
from src.api.admin.commissions import router as commissions_router
from src.api.admin.payroll import router as payroll_router
from src.api.admin.settings import router as settings_router
from src.api.admin.users import router as users_router

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(settings_router)
admin_router.include_router(change_requests_router)
admin_router.include_router(commissions_router)
admin_router.include_router(payroll_router)
admin_router.include_router(users_router)

__all__ = ["admin_router"]
