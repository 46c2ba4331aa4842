"""API routers."""
from .registration import router as registration_router
from .environment import router as environment_router
from .diagnostics import router as diagnostics_router
from .links import router as links_router

__all__ = ["registration_router", "environment_router", "diagnostics_router", "links_router"]
