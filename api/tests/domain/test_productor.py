"""Unit tests for the Productor entity and code assignment."""

import uuid
from datetime import UTC, datetime

import pytest

from core.errors import ConflictError, DomainValidationError
from domain.productor import (
    CategoriaProductor,
    Productor,
    next_codigo,
    validate_anio_ingreso,
)

ORG_ID = uuid.uuid4()


@pytest.mark.unit
class TestProductorCreate:
    def test_valid(self):
        productor = Productor.create(
            "  Juan Mamani ", ORG_ID, 2019, ci_documento=" 4567890-1B ", categoria="2T"
        )

        assert productor.nombre_productor == "Juan Mamani"
        assert productor.ci_documento == "4567890-1B"
        assert productor.categoria_actual is CategoriaProductor.T2
        assert productor.codigo_productor is None
        assert productor.activo is True

    def test_blank_ci_is_none(self):
        productor = Productor.create("Juan Mamani", ORG_ID, 2019, ci_documento="  ")
        assert productor.ci_documento is None

    @pytest.mark.parametrize("nombre", ["", "ab", "x" * 201])
    def test_name_length(self, nombre):
        with pytest.raises(DomainValidationError) as exc_info:
            Productor.create(nombre, ORG_ID, 2019)
        assert exc_info.value.field == "nombre_productor"

    @pytest.mark.parametrize("ci", ["12345", "1" * 21, "123 456", "1234567/8"])
    def test_invalid_ci(self, ci):
        with pytest.raises(DomainValidationError) as exc_info:
            Productor.create("Juan Mamani", ORG_ID, 2019, ci_documento=ci)
        assert exc_info.value.field == "ci_documento"

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            Productor.create("Juan Mamani", ORG_ID, 2019, categoria="3T")


@pytest.mark.unit
class TestAnioIngreso:
    def test_range_follows_current_year(self):
        today = datetime(2025, 3, 1, tzinfo=UTC)

        assert validate_anio_ingreso(2000, today) == 2000
        assert validate_anio_ingreso(2026, today) == 2026
        with pytest.raises(DomainValidationError):
            validate_anio_ingreso(2027, today)
        with pytest.raises(DomainValidationError) as exc_info:
            validate_anio_ingreso(1999, today)
        assert exc_info.value.field == "anio_ingreso_programa"


@pytest.mark.unit
class TestNextCodigo:
    def test_first_code(self):
        assert next_codigo("cn", []) == "VSCN001"

    def test_follows_highest_issued(self):
        existing = ["VSCN001", "VSCN007", "VSCN003"]
        assert next_codigo("CN", existing) == "VSCN008"

    def test_ignores_codes_without_numeric_suffix(self):
        existing = ["VSCN002", "VSCNX01", "VSCN", "OTHER999"]
        assert next_codigo("CN", existing) == "VSCN003"

    def test_sequence_limit(self):
        with pytest.raises(ConflictError, match="límite"):
            next_codigo("CN", ["VSCN999"])
