"""Route tests for /api/reportes."""

from io import BytesIO

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook

from services.reporte_service import HEADERS, XLSX_MEDIA_TYPE
from tests.factories import GestionFactory, OrganizacionFactory, ProductorFactory

pytestmark = pytest.mark.integration


class TestProductoresOrganicos:
    async def test_downloads_spreadsheet(self, gerente_client: AsyncClient, persist):
        await persist(GestionFactory, anio_gestion=2025, activo_sistema=True)
        org = await persist(
            OrganizacionFactory,
            nombre_organizacion="Cooperativa Norte",
            abreviatura_organizacion="CN",
        )
        await persist(
            ProductorFactory,
            codigo_productor="PRD-00001",
            nombre_productor="Juan Pérez",
            id_organizacion=org.id_organizacion,
        )

        response = await gerente_client.get("/api/reportes/productores-organicos")

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert response.headers["content-disposition"] == (
            'attachment; filename="Reporte_Productores_Organicos_Gestion_2025.xlsx"'
        )
        ws = load_workbook(BytesIO(response.content)).active
        assert ws.title == "Gestión 2025"
        assert [c.value for c in ws[5]] == HEADERS
        assert ws["B6"].value == "PRD-00001"
        assert ws["C6"].value == "Juan Pérez"
        assert ws["E6"].value == "Cooperativa Norte (CN)"
        assert ws["A7"].value == "TOTAL"

    async def test_no_active_period(self, gerente_client: AsyncClient):
        response = await gerente_client.get("/api/reportes/productores-organicos")

        assert response.status_code == 500
        assert response.json()["error"] == "no_active_gestion"

    async def test_tecnico_forbidden(self, tecnico_client: AsyncClient, persist):
        await persist(GestionFactory, anio_gestion=2025, activo_sistema=True)

        response = await tecnico_client.get("/api/reportes/productores-organicos")

        assert response.status_code == 403
