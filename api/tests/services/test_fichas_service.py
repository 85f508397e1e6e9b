"""Tests for fichas_service creation, submission, approval and rejection."""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from core.auth import CurrentUser
from core.errors import (
    BadRequestError,
    ConflictError,
    DomainValidationError,
    NotFoundError,
)
from core.gestion_context import GestionActiva
from domain.ficha import EstadoFicha
from schemas import FichaCreate
from services.fichas_service import (
    aprobar_ficha,
    crear_ficha,
    enviar_revision,
    rechazar_ficha,
)

GERENTE = CurrentUser(user_id=str(uuid.uuid4()), username="gerente1", role="gerente")


def _ficha(estado: EstadoFicha, **overrides):
    values = {
        "id_ficha": uuid.uuid4(),
        "codigo_productor": "PRD-00001",
        "gestion": 2025,
        "estado_ficha": estado,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.unit
class TestAprobarFicha:
    async def test_approves_and_syncs(self):
        ficha = _ficha(EstadoFicha.REVISION)
        approved = _ficha(EstadoFicha.APROBADO, id_ficha=ficha.id_ficha)

        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.CultivosGestionRepository", autospec=True
            ) as mock_sync_class,
            patch("services.fichas_service.audit") as mock_audit,
        ):
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_id = AsyncMock(return_value=ficha)
            mock_repo.update_estado = AsyncMock(return_value=approved)
            mock_sync_class.return_value.sync_from_ficha = AsyncMock(return_value=1)

            result = await aprobar_ficha(AsyncMock(), GERENTE, ficha.id_ficha, "ok")

        assert result.ficha is approved
        assert result.cultivos_sincronizados == 1
        mock_repo.update_estado.assert_awaited_once_with(
            ficha.id_ficha, EstadoFicha.REVISION, EstadoFicha.APROBADO, "ok"
        )
        mock_sync_class.return_value.sync_from_ficha.assert_awaited_once_with(
            ficha.id_ficha
        )
        assert mock_audit.call_args.args[0] == "ficha.approved"

    async def test_not_in_revision(self):
        ficha = _ficha(EstadoFicha.BORRADOR)
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.CultivosGestionRepository", autospec=True
            ) as mock_sync_class,
        ):
            mock_repo_class.return_value.find_by_id = AsyncMock(return_value=ficha)
            with pytest.raises(BadRequestError):
                await aprobar_ficha(AsyncMock(), GERENTE, ficha.id_ficha)

        mock_repo_class.return_value.update_estado.assert_not_called()
        mock_sync_class.return_value.sync_from_ficha.assert_not_called()

    async def test_lost_race(self):
        ficha = _ficha(EstadoFicha.REVISION)
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.CultivosGestionRepository", autospec=True
            ) as mock_sync_class,
        ):
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_id = AsyncMock(return_value=ficha)
            mock_repo.update_estado = AsyncMock(return_value=None)
            with pytest.raises(BadRequestError, match="otro usuario"):
                await aprobar_ficha(AsyncMock(), GERENTE, ficha.id_ficha)

        mock_sync_class.return_value.sync_from_ficha.assert_not_called()

    async def test_missing(self):
        with patch(
            "services.fichas_service.FichaRepository", autospec=True
        ) as mock_repo_class:
            mock_repo_class.return_value.find_by_id = AsyncMock(return_value=None)
            with pytest.raises(NotFoundError):
                await aprobar_ficha(AsyncMock(), GERENTE, uuid.uuid4())


@pytest.mark.unit
class TestRechazarFicha:
    async def test_rejects_with_reason_and_no_sync(self):
        ficha = _ficha(EstadoFicha.REVISION)
        rejected = _ficha(EstadoFicha.RECHAZADO, id_ficha=ficha.id_ficha)
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.CultivosGestionRepository", autospec=True
            ) as mock_sync_class,
            patch("services.fichas_service.audit"),
        ):
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_id = AsyncMock(return_value=ficha)
            mock_repo.update_estado = AsyncMock(return_value=rejected)

            result = await rechazar_ficha(
                AsyncMock(), GERENTE, ficha.id_ficha, "  Falta croquis  "
            )

        assert result.cultivos_sincronizados == 0
        mock_repo.update_estado.assert_awaited_once_with(
            ficha.id_ficha,
            EstadoFicha.REVISION,
            EstadoFicha.RECHAZADO,
            "Falta croquis",
        )
        mock_sync_class.assert_not_called()


TECNICO = CurrentUser(user_id=str(uuid.uuid4()), username="tecnico1", role="tecnico")
GESTION = GestionActiva(id_gestion=uuid.uuid4(), anio=2025)


def _create_data(**overrides) -> FichaCreate:
    values = {
        "codigo_productor": "VSCN001",
        "fecha_inspeccion": "2025-06-15",
        "inspector_interno": " Ana Quispe ",
        "detalle_cultivos_parcelas": [
            {"id_tipo_cultivo": str(uuid.uuid4()), "superficie_ha": 1.5}
        ],
        "cosecha_ventas": [{"cosecha_estimada_qq": 12}],
    }
    values.update(overrides)
    return FichaCreate.model_validate(values)


@pytest.mark.unit
class TestCrearFicha:
    async def test_creates_in_active_period(self):
        data = _create_data()
        created = _ficha(EstadoFicha.BORRADOR, codigo_productor="VSCN001")
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.ProductorRepository", autospec=True
            ) as mock_productores,
            patch(
                "services.fichas_service.TipoCultivoRepository", autospec=True
            ) as mock_tipos,
            patch("services.fichas_service.audit") as mock_audit,
        ):
            mock_productores.return_value.find_by_codigo = AsyncMock(
                return_value=SimpleNamespace(codigo_productor="VSCN001")
            )
            mock_tipos.return_value.find_by_id = AsyncMock(
                return_value=SimpleNamespace(activo=True)
            )
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_productor_gestion = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=created)

            result = await crear_ficha(AsyncMock(), TECNICO, GESTION, data)

        assert result is created
        kwargs = mock_repo.create.await_args.kwargs
        assert kwargs["gestion"] == 2025
        assert kwargs["inspector_interno"] == "Ana Quispe"
        assert kwargs["created_by"] == uuid.UUID(TECNICO.user_id)
        assert kwargs["detalles"] == [
            (data.detalle_cultivos_parcelas[0].id_tipo_cultivo, 1.5)
        ]
        assert kwargs["cosechas"] == [(12.0, 0.0)]
        assert mock_audit.call_args.args[0] == "ficha.created"

    async def test_invalid_surface_before_any_lookup(self):
        data = _create_data(
            detalle_cultivos_parcelas=[
                {"id_tipo_cultivo": str(uuid.uuid4()), "superficie_ha": -2}
            ]
        )
        with patch(
            "services.fichas_service.ProductorRepository", autospec=True
        ) as mock_productores:
            with pytest.raises(DomainValidationError):
                await crear_ficha(AsyncMock(), TECNICO, GESTION, data)

        mock_productores.return_value.find_by_codigo.assert_not_called()

    async def test_existing_ficha_in_period(self):
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch(
                "services.fichas_service.ProductorRepository", autospec=True
            ) as mock_productores,
            patch("services.fichas_service.TipoCultivoRepository", autospec=True),
        ):
            mock_productores.return_value.find_by_codigo = AsyncMock(
                return_value=SimpleNamespace(codigo_productor="VSCN001")
            )
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_productor_gestion = AsyncMock(
                return_value=_ficha(EstadoFicha.APROBADO)
            )

            with pytest.raises(ConflictError):
                await crear_ficha(
                    AsyncMock(),
                    TECNICO,
                    GESTION,
                    _create_data(detalle_cultivos_parcelas=[]),
                )

        mock_repo.create.assert_not_called()


@pytest.mark.unit
class TestEnviarRevision:
    async def test_borrador_to_revision(self):
        ficha = _ficha(EstadoFicha.BORRADOR)
        submitted = _ficha(EstadoFicha.REVISION, id_ficha=ficha.id_ficha)
        with (
            patch(
                "services.fichas_service.FichaRepository", autospec=True
            ) as mock_repo_class,
            patch("services.fichas_service.audit") as mock_audit,
        ):
            mock_repo = mock_repo_class.return_value
            mock_repo.find_by_id = AsyncMock(return_value=ficha)
            mock_repo.update_estado = AsyncMock(return_value=submitted)

            result = await enviar_revision(AsyncMock(), TECNICO, ficha.id_ficha)

        assert result.ficha is submitted
        mock_repo.update_estado.assert_awaited_once_with(
            ficha.id_ficha, EstadoFicha.BORRADOR, EstadoFicha.REVISION, None
        )
        assert mock_audit.call_args.args[0] == "ficha.submitted"

    async def test_rechazado_must_return_to_borrador_first(self):
        ficha = _ficha(EstadoFicha.RECHAZADO)
        with patch(
            "services.fichas_service.FichaRepository", autospec=True
        ) as mock_repo_class:
            mock_repo_class.return_value.find_by_id = AsyncMock(return_value=ficha)
            with pytest.raises(BadRequestError):
                await enviar_revision(AsyncMock(), TECNICO, ficha.id_ficha)

        mock_repo_class.return_value.update_estado.assert_not_called()
