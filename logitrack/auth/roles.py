"""Rôles applicatifs et normalisation de leur casse."""

from __future__ import annotations

from typing import Any, Iterable

from logitrack.models.user.utilisateur_model import UserRole

CANONICAL_ROLES: frozenset[str] = frozenset(role.value for role in UserRole)

# Rôle attribué lorsqu'une valeur non textuelle est stockée en base.
FALLBACK_ROLE = UserRole.LIVREUR.value


class InvalidRoleError(ValueError):
    """Le rôle normalisé n'est pas l'un des trois rôles connus."""

    def __init__(self, value: Any):
        super().__init__(f"Rôle inconnu: {value!r}")
        self.value = value


def normalize_role(value: Any) -> str:
    """Première lettre en majuscule, le reste en minuscules.

    ``"LIVREUR"``, ``"livreur"`` et ``"Livreur"`` donnent tous ``"Livreur"``.
    Une valeur non textuelle retombe sur ``Livreur``.
    """
    if isinstance(value, UserRole):
        return value.value
    if not isinstance(value, str):
        return FALLBACK_ROLE

    normalized = value[:1].upper() + value[1:].lower()
    if normalized not in CANONICAL_ROLES:
        raise InvalidRoleError(value)
    return normalized


def role_in(role: Any, allowed: Iterable[str]) -> bool:
    """Vrai si le rôle, une fois normalisé, fait partie de ``allowed``."""
    try:
        return normalize_role(role) in set(allowed)
    except InvalidRoleError:
        return False
