"""Módulo de endpoints HTTP del collector."""

from .dashboard import router as dashboard_router
from .health import router as health_router
from .prune import router as prune_router
from .stats import router as stats_router

__all__ = [
    "dashboard_router",
    "health_router",
    "prune_router",
    "stats_router",
]
