"""API route handlers."""

from .admin import router as admin_router
from .matches import router as matches_router
from .schedules import router as schedules_router
