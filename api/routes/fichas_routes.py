"""Inspection record endpoints: creation, review workflow and drafts.

Route ordering note: ``/draft`` paths are declared before ``/{id_ficha}``
paths.
"""

import uuid

from fastapi import APIRouter, Response

from core.auth import ManagerUser, StaffUser
from core.database import DbSession
from core.gestion_context import ActiveGestion
from domain.draft import DraftDocument
from models import FichaDraft
from schemas import (
    AprobarFichaRequest,
    DraftListResponse,
    DraftResponse,
    DraftSaveRequest,
    FichaCreate,
    FichaDetailResponse,
    FichaEstadoResponse,
    FichaMutationResponse,
    FichaResponse,
    RechazarFichaRequest,
)
from services import ficha_drafts_service, fichas_service

router = APIRouter(prefix="/api/fichas", tags=["fichas"])


def _draft_response(draft: FichaDraft) -> DraftResponse:
    return DraftResponse(
        id_draft=draft.id_draft,
        codigo_productor=draft.codigo_productor,
        gestion=draft.gestion,
        step_actual=draft.step_actual,
        schema_version=draft.schema_version,
        draft=DraftDocument.model_validate(draft.draft_data),
        created_at=draft.created_at,
        updated_at=draft.updated_at,
    )


# --- Drafts ---


@router.put(
    "/draft",
    response_model=DraftResponse,
    responses={500: {"description": "No active period configured"}},
)
async def save_draft(
    body: DraftSaveRequest,
    user: StaffUser,
    gestion: ActiveGestion,
    db: DbSession,
) -> DraftResponse:
    """Create or overwrite the caller's draft for a producer in the active period."""
    draft = await ficha_drafts_service.save_draft(
        db, user, gestion, body.codigo_productor, body.draft
    )
    return _draft_response(draft)


@router.get("/draft", response_model=DraftListResponse)
async def list_my_drafts(user: StaffUser, db: DbSession) -> DraftListResponse:
    drafts = await ficha_drafts_service.list_my_drafts(db, user)
    return DraftListResponse(
        drafts=[_draft_response(d) for d in drafts], total=len(drafts)
    )


@router.get(
    "/draft/{codigo_productor}",
    response_model=DraftResponse,
    responses={404: {"description": "No draft for this producer"}},
)
async def get_draft(
    codigo_productor: str,
    user: StaffUser,
    gestion: ActiveGestion,
    db: DbSession,
) -> DraftResponse:
    """The caller's draft for ``codigo_productor`` in the active period."""
    draft = await ficha_drafts_service.get_draft(
        db, user, codigo_productor, gestion.anio
    )
    return _draft_response(draft)


@router.delete(
    "/draft/{id_draft}",
    status_code=204,
    responses={
        403: {"description": "Draft belongs to another user"},
        404: {"description": "Draft not found"},
    },
)
async def delete_draft(id_draft: uuid.UUID, user: StaffUser, db: DbSession) -> Response:
    await ficha_drafts_service.delete_draft(db, user, id_draft)
    return Response(status_code=204)


# --- Review workflow ---


@router.post(
    "/{id_ficha}/aprobar",
    response_model=FichaEstadoResponse,
    responses={
        400: {"description": "Ficha is not in revision"},
        404: {"description": "Ficha not found"},
    },
)
async def aprobar_ficha(
    id_ficha: uuid.UUID,
    user: ManagerUser,
    db: DbSession,
    body: AprobarFichaRequest | None = None,
) -> FichaEstadoResponse:
    result = await fichas_service.aprobar_ficha(
        db, user, id_ficha, body.comentarios if body else None
    )
    return FichaEstadoResponse(
        ficha=FichaResponse.model_validate(result.ficha),
        message="Ficha aprobada exitosamente",
        cultivos_sincronizados=result.cultivos_sincronizados,
    )


@router.post(
    "/{id_ficha}/rechazar",
    response_model=FichaEstadoResponse,
    responses={
        400: {"description": "Ficha is not in revision"},
        404: {"description": "Ficha not found"},
    },
)
async def rechazar_ficha(
    id_ficha: uuid.UUID,
    body: RechazarFichaRequest,
    user: ManagerUser,
    db: DbSession,
) -> FichaEstadoResponse:
    result = await fichas_service.rechazar_ficha(db, user, id_ficha, body.motivo)
    return FichaEstadoResponse(
        ficha=FichaResponse.model_validate(result.ficha),
        message="Ficha rechazada",
    )


# --- Fichas ---


@router.post(
    "",
    response_model=FichaMutationResponse,
    status_code=201,
    responses={
        404: {"description": "Producer or crop type not found"},
        409: {"description": "Producer already has a ficha in the active period"},
        500: {"description": "No active period configured"},
    },
)
async def crear_ficha(
    body: FichaCreate,
    user: StaffUser,
    gestion: ActiveGestion,
    db: DbSession,
) -> FichaMutationResponse:
    ficha = await fichas_service.crear_ficha(db, user, gestion, body)
    return FichaMutationResponse(
        ficha=FichaResponse.model_validate(ficha),
        message="Ficha creada exitosamente",
    )


@router.get(
    "/{id_ficha}",
    response_model=FichaDetailResponse,
    responses={404: {"description": "Ficha not found"}},
)
async def get_ficha(
    id_ficha: uuid.UUID, user: StaffUser, db: DbSession
) -> FichaDetailResponse:
    ficha = await fichas_service.get_ficha(db, id_ficha)
    return FichaDetailResponse(ficha=FichaResponse.model_validate(ficha))


@router.post(
    "/{id_ficha}/enviar-revision",
    response_model=FichaEstadoResponse,
    responses={
        400: {"description": "Ficha is not a borrador"},
        404: {"description": "Ficha not found"},
    },
)
async def enviar_revision(
    id_ficha: uuid.UUID, user: StaffUser, db: DbSession
) -> FichaEstadoResponse:
    result = await fichas_service.enviar_revision(db, user, id_ficha)
    return FichaEstadoResponse(
        ficha=FichaResponse.model_validate(result.ficha),
        message="Ficha enviada a revisión",
    )
