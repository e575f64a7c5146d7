"""Módulo de endpoints HTTP.

Contiene los endpoints de consulta, salud, estadísticas y comandos.
"""

from .commands import router as commands_router
from .health import router as health_router
from .stats import router as stats_router
from .tanks import router as tanks_router

__all__ = [
    "commands_router",
    "health_router",
    "stats_router",
    "tanks_router",
]
