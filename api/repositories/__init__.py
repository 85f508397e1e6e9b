"""Repository layer for database operations.

Repositories own all SQL and row-to-entity mapping. Services call them;
routes never do.
"""

from repositories.cultivos_gestion_repository import CultivosGestionRepository
from repositories.ficha_draft_repository import FichaDraftRepository
from repositories.ficha_repository import FichaRepository
from repositories.gestion_repository import GestionRepository
from repositories.organizacion_repository import OrganizacionRepository
from repositories.productor_repository import ProductorRepository
from repositories.reporte_repository import ReporteRepository
from repositories.tipo_cultivo_repository import TipoCultivoRepository
from repositories.usuario_repository import RolRepository, UsuarioRepository
from repositories.utils import log_slow_query

__all__ = [
    "CultivosGestionRepository",
    "FichaDraftRepository",
    "FichaRepository",
    "GestionRepository",
    "OrganizacionRepository",
    "ProductorRepository",
    "ReporteRepository",
    "RolRepository",
    "TipoCultivoRepository",
    "UsuarioRepository",
    "log_slow_query",
]
