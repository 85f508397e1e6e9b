"""Unit tests for core.roles.

Tests cover:
- level lookup with normalization and unknown roles
- can_manage strict ordering (irreflexive, transitive)
- manageable_roles / can_create_users per role
"""

import itertools

import pytest

from core.roles import (
    ROLE_LEVELS,
    UNKNOWN_LEVEL,
    Role,
    can_create_users,
    can_manage,
    is_administrador,
    is_gerente,
    is_tecnico,
    level_of,
    manageable_roles,
    normalize_role,
)

ALL_ROLES = [str(r) for r in Role]


@pytest.mark.unit
class TestLevelOf:
    def test_known_roles(self):
        assert level_of("administrador") == 1
        assert level_of("gerente") == 2
        assert level_of("tecnico") == 3
        assert level_of("invitado") == 4

    def test_normalizes_case_and_whitespace(self):
        assert level_of("  GERENTE ") == 2
        assert normalize_role(" Tecnico") == "tecnico"

    @pytest.mark.parametrize("role", ["", None, "superuser", "admin"])
    def test_unknown_role_gets_sentinel(self, role):
        assert level_of(role) == UNKNOWN_LEVEL


@pytest.mark.unit
class TestCanManage:
    def test_higher_authority_manages_lower(self):
        assert can_manage("administrador", "gerente") is True
        assert can_manage("gerente", "tecnico") is True
        assert can_manage("tecnico", "invitado") is True

    def test_lower_cannot_manage_higher(self):
        assert can_manage("gerente", "administrador") is False
        assert can_manage("invitado", "tecnico") is False

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_no_role_manages_itself(self, role):
        assert can_manage(role, role) is False

    def test_unknown_role_manages_nobody(self):
        for target in ALL_ROLES + ["otro"]:
            assert can_manage("otro", target) is False

    def test_every_known_role_outranks_unknown(self):
        for role in ALL_ROLES:
            assert can_manage(role, "otro") is True

    def test_transitive(self):
        for a, b, c in itertools.permutations(ALL_ROLES, 3):
            if can_manage(a, b) and can_manage(b, c):
                assert can_manage(a, c), (a, b, c)


@pytest.mark.unit
class TestManageableRoles:
    def test_administrador(self):
        assert manageable_roles("administrador") == {"gerente", "tecnico", "invitado"}

    def test_gerente(self):
        assert manageable_roles("gerente") == {"tecnico", "invitado"}

    def test_invitado_manages_nothing(self):
        assert manageable_roles("invitado") == set()

    def test_values_are_plain_strings(self):
        assert all(type(r) is str for r in manageable_roles("administrador"))

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_consistent_with_can_manage(self, role):
        expected = {t for t in ROLE_LEVELS if can_manage(role, t)}
        assert manageable_roles(role) == expected


@pytest.mark.unit
class TestRolePredicates:
    def test_can_create_users(self):
        assert can_create_users("administrador") is True
        assert can_create_users("gerente") is True
        assert can_create_users("tecnico") is False
        assert can_create_users("invitado") is False
        assert can_create_users(None) is False

    def test_is_helpers(self):
        assert is_administrador("Administrador") is True
        assert is_gerente("gerente") is True
        assert is_tecnico("tecnico") is True
        assert is_tecnico("gerente") is False
