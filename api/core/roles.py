"""Role hierarchy.

Four fixed roles, each with a numeric authority level. A lower number means
more authority. Unknown role names get ``UNKNOWN_LEVEL`` and can never
manage anyone.
"""

from enum import StrEnum


class Role(StrEnum):
    ADMINISTRADOR = "administrador"
    GERENTE = "gerente"
    TECNICO = "tecnico"
    INVITADO = "invitado"


ROLE_LEVELS: dict[str, int] = {
    Role.ADMINISTRADOR: 1,
    Role.GERENTE: 2,
    Role.TECNICO: 3,
    Role.INVITADO: 4,
}

UNKNOWN_LEVEL = 999


def normalize_role(role_name: str | None) -> str:
    return (role_name or "").strip().lower()


def level_of(role_name: str | None) -> int:
    return ROLE_LEVELS.get(normalize_role(role_name), UNKNOWN_LEVEL)


def can_manage(acting_role: str | None, target_role: str | None) -> bool:
    """True iff the acting role has strictly more authority than the target."""
    return level_of(acting_role) < level_of(target_role)


def manageable_roles(acting_role: str | None) -> set[str]:
    acting_level = level_of(acting_role)
    return {str(role) for role, level in ROLE_LEVELS.items() if level > acting_level}


def can_create_users(role_name: str | None) -> bool:
    return level_of(role_name) <= ROLE_LEVELS[Role.GERENTE]


def is_administrador(role_name: str | None) -> bool:
    return normalize_role(role_name) == Role.ADMINISTRADOR


def is_gerente(role_name: str | None) -> bool:
    return normalize_role(role_name) == Role.GERENTE


def is_tecnico(role_name: str | None) -> bool:
    return normalize_role(role_name) == Role.TECNICO
