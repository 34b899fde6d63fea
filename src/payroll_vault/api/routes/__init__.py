"""API routes."""

from payroll_vault.api.routes.health import router as health_router
from payroll_vault.api.routes.payroll import router as payroll_router

__all__ = ["health_router", "payroll_router"]
