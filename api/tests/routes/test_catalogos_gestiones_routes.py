"""Route tests for /api/catalogos/tipos-cultivo and /api/gestiones."""

import uuid

import pytest
from httpx import AsyncClient

from tests.factories import GestionFactory, TipoCultivoFactory

pytestmark = pytest.mark.integration


class TestTiposCultivoRoutes:
    async def test_admin_creates(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/catalogos/tipos-cultivo",
            json={
                "nombre_cultivo": "Maní",
                "descripcion": "Cultivo certificable",
                "es_principal_certificable": True,
                "rendimiento_promedio_qq_ha": 25,
            },
        )

        assert response.status_code == 201
        tipo = response.json()["tipo_cultivo"]
        assert tipo["nombre_cultivo"] == "Maní"
        assert tipo["rendimiento_promedio_qq_ha"] == 25.0
        assert tipo["activo"] is True

    async def test_gerente_cannot_create(self, gerente_client: AsyncClient):
        response = await gerente_client.post(
            "/api/catalogos/tipos-cultivo", json={"nombre_cultivo": "Maíz"}
        )

        assert response.status_code == 403

    async def test_non_positive_yield(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/catalogos/tipos-cultivo",
            json={"nombre_cultivo": "Maíz", "rendimiento_promedio_qq_ha": 0},
        )

        assert response.status_code == 422
        assert response.json()["field"] == "rendimiento_promedio_qq_ha"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    async def test_non_finite_yield(self, admin_client: AsyncClient, literal):
        body = f'{{"nombre_cultivo": "Papa", "rendimiento_promedio_qq_ha": {literal}}}'

        response = await admin_client.post(
            "/api/catalogos/tipos-cultivo",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["field"] == "rendimiento_promedio_qq_ha"
        listed = await admin_client.get("/api/catalogos/tipos-cultivo")
        assert listed.json()["total"] == 0

    async def test_duplicate_name(self, admin_client: AsyncClient, persist):
        await persist(TipoCultivoFactory, nombre_cultivo="Papa")

        response = await admin_client.post(
            "/api/catalogos/tipos-cultivo", json={"nombre_cultivo": "papa"}
        )

        assert response.status_code == 409

    async def test_list_and_detail(self, tecnico_client: AsyncClient, persist):
        await persist(TipoCultivoFactory, nombre_cultivo="Papa")
        retired = await persist(TipoCultivoFactory, nombre_cultivo="Ají", activo=False)

        listed = await tecnico_client.get("/api/catalogos/tipos-cultivo")
        detail = await tecnico_client.get(
            f"/api/catalogos/tipos-cultivo/{retired.id_tipo_cultivo}"
        )

        assert [t["nombre_cultivo"] for t in listed.json()["tipos_cultivo"]] == [
            "Papa"
        ]
        assert detail.status_code == 200
        assert detail.json()["tipo_cultivo"]["activo"] is False

    async def test_update_and_delete(self, admin_client: AsyncClient, persist):
        tipo = await persist(TipoCultivoFactory, nombre_cultivo="Papa")
        path = f"/api/catalogos/tipos-cultivo/{tipo.id_tipo_cultivo}"

        updated = await admin_client.put(path, json={"descripcion": "Tubérculo"})
        deleted = await admin_client.delete(path)
        after = await admin_client.get(path)

        assert updated.json()["tipo_cultivo"]["descripcion"] == "Tubérculo"
        assert deleted.status_code == 204
        assert after.json()["tipo_cultivo"]["activo"] is False

    async def test_delete_missing(self, admin_client: AsyncClient):
        response = await admin_client.delete(
            f"/api/catalogos/tipos-cultivo/{uuid.uuid4()}"
        )

        assert response.status_code == 404


class TestGestionesRoutes:
    async def test_admin_creates_with_default_name(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/gestiones", json={"anio_gestion": 2026}
        )

        assert response.status_code == 201
        gestion = response.json()["gestion"]
        assert gestion["nombre_gestion"] == "Gestión 2026"
        assert gestion["activo_sistema"] is False

    async def test_year_out_of_range(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/gestiones", json={"anio_gestion": 1999}
        )

        assert response.status_code == 422
        assert response.json()["field"] == "anio_gestion"

    async def test_duplicate_year(self, admin_client: AsyncClient, persist):
        await persist(GestionFactory, anio_gestion=2026)

        response = await admin_client.post(
            "/api/gestiones", json={"anio_gestion": 2026}
        )

        assert response.status_code == 409

    async def test_list_newest_first(self, tecnico_client: AsyncClient, persist):
        for anio in (2023, 2025, 2024):
            await persist(GestionFactory, anio_gestion=anio)
        await persist(GestionFactory, anio_gestion=2020, activo=False)

        response = await tecnico_client.get("/api/gestiones")

        assert [g["anio_gestion"] for g in response.json()["gestiones"]] == [
            2025,
            2024,
            2023,
        ]

    async def test_activa(self, tecnico_client: AsyncClient, persist):
        await persist(GestionFactory, anio_gestion=2025, activo_sistema=True)

        response = await tecnico_client.get("/api/gestiones/activa")

        assert response.status_code == 200
        assert response.json()["gestion"]["anio_gestion"] == 2025

    async def test_activa_missing(self, tecnico_client: AsyncClient):
        response = await tecnico_client.get("/api/gestiones/activa")

        assert response.status_code == 404

    async def test_activar_switches(self, admin_client: AsyncClient, persist):
        await persist(GestionFactory, anio_gestion=2024, activo_sistema=True)
        nueva = await persist(GestionFactory, anio_gestion=2025)

        response = await admin_client.post(f"/api/gestiones/{nueva.id_gestion}/activar")

        assert response.status_code == 200
        body = response.json()
        assert body["gestion"]["activo_sistema"] is True
        assert body["gestion_anterior"] == 2024
        activa = await admin_client.get("/api/gestiones/activa")
        assert activa.json()["gestion"]["anio_gestion"] == 2025

    async def test_activar_inactive_period(self, admin_client: AsyncClient, persist):
        vieja = await persist(GestionFactory, anio_gestion=2019, activo=False)

        response = await admin_client.post(f"/api/gestiones/{vieja.id_gestion}/activar")

        assert response.status_code == 400

    async def test_activar_requires_admin(self, gerente_client: AsyncClient, persist):
        gestion = await persist(GestionFactory, anio_gestion=2025)

        response = await gerente_client.post(
            f"/api/gestiones/{gestion.id_gestion}/activar"
        )

        assert response.status_code == 403

    async def test_system_period_not_deleted(self, admin_client: AsyncClient, persist):
        gestion = await persist(GestionFactory, anio_gestion=2025, activo_sistema=True)

        response = await admin_client.delete(f"/api/gestiones/{gestion.id_gestion}")

        assert response.status_code == 409

    async def test_rename(self, admin_client: AsyncClient, persist):
        gestion = await persist(GestionFactory, anio_gestion=2025)

        response = await admin_client.put(
            f"/api/gestiones/{gestion.id_gestion}",
            json={"nombre_gestion": "Campaña 2025"},
        )

        assert response.status_code == 200
        assert response.json()["gestion"]["nombre_gestion"] == "Campaña 2025"
