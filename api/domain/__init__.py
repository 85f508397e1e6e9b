"""Domain layer: entities, invariants and named mutators.

Entities are built only through their ``create`` factory (new records) or
``from_row`` (persisted records) and change state only through named
mutators, each of which re-validates its own field.

This layer depends only on stdlib, pydantic and ``core.errors``. It must
never import from repositories, services or routes.
"""

from domain.draft import DraftDocument
from domain.ficha import transition_ficha
from domain.gestion import Gestion
from domain.organizacion import Organizacion
from domain.productor import Productor
from domain.tipo_cultivo import TipoCultivo

__all__ = [
    "DraftDocument",
    "Gestion",
    "Organizacion",
    "Productor",
    "TipoCultivo",
    "transition_ficha",
]
