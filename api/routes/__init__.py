"""API route modules."""

from routes.auth_routes import router as auth_router
from routes.catalogos_routes import router as catalogos_router
from routes.fichas_routes import router as fichas_router
from routes.gestiones_routes import router as gestiones_router
from routes.health_routes import router as health_router
from routes.organizaciones_routes import router as organizaciones_router
from routes.productores_routes import router as productores_router
from routes.reportes_routes import router as reportes_router
from routes.usuarios_routes import router as usuarios_router

__all__ = [
    "auth_router",
    "catalogos_router",
    "fichas_router",
    "gestiones_router",
    "health_router",
    "organizaciones_router",
    "productores_router",
    "reportes_router",
    "usuarios_router",
]
