"""Panel API router aggregation."""

from fastapi import APIRouter

from src.api.panel.deliveries import router as deliveries_router
from src.api.panel.income import router as income_router
from src.api.panel.recovery import router as recovery_router
from src.api.panel.sales import router as sales_router
from src.api.panel.team import router as team_router

panel_router = APIRouter(prefix="/panel", tags=["Panel"])

panel_router.include_router(sales_router)
panel_router.include_router(team_router)
panel_router.include_router(income_router)
panel_router.include_router(recovery_router)
panel_router.include_router(deliveries_router)

__all__ = ["panel_router"]
