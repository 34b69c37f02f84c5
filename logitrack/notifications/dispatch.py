"""Envoi de notifications à d'autres utilisateurs ou à un groupe de rôles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from logitrack.auth.roles import InvalidRoleError, normalize_role
from logitrack.crud import notification_crud, utilisateur_crud
from logitrack.models.logistics.colis_model import Colis
from logitrack.models.user.notification_model import NotificationType
from logitrack.models.user.utilisateur_model import UserRole

logger = logging.getLogger(__name__)

RECLAMATION_RECIPIENT_ROLES = (UserRole.ADMIN.value, UserRole.GESTIONNAIRE.value)


@dataclass
class DispatchResult:
    success: bool
    count: int = 0
    error: Optional[str] = None


def notify_user(
    db: Session,
    user_id: int,
    *,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    link: Optional[str] = None,
) -> DispatchResult:
    return notify_users(db, [user_id], title=title, message=message, type=type, link=link)


def notify_users(
    db: Session,
    user_ids: Iterable[int],
    *,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    link: Optional[str] = None,
) -> DispatchResult:
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return DispatchResult(success=True, count=0)

    try:
        rows = notification_crud.create_notifications(
            db,
            user_ids=ids,
            title=title,
            message=message,
            type=NotificationType(type).value,
            link=link,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Impossible de créer les notifications pour %s: %s", ids, exc)
        return DispatchResult(success=False, error="notification_insert_failed")

    return DispatchResult(success=True, count=len(rows))


def notify_role(
    db: Session,
    role: str,
    *,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    link: Optional[str] = None,
) -> DispatchResult:
    """Notifie chaque utilisateur portant ``role``."""
    try:
        canonical = normalize_role(role)
    except InvalidRoleError:
        return DispatchResult(success=False, error="unknown_role")

    return notify_roles(db, [canonical], title=title, message=message, type=type, link=link)


def notify_roles(
    db: Session,
    roles: Iterable[str],
    *,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.INFO,
    link: Optional[str] = None,
) -> DispatchResult:
    try:
        user_ids = utilisateur_crud.get_user_ids_by_roles(db, roles)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Impossible de lister les utilisateurs des rôles %s: %s", list(roles), exc)
        return DispatchResult(success=False, error="recipients_lookup_failed")

    if not user_ids:
        logger.info("Aucun destinataire pour les rôles %s.", list(roles))
        return DispatchResult(success=True, count=0)

    return notify_users(db, user_ids, title=title, message=message, type=type, link=link)


def notify_reclamation(
    db: Session,
    *,
    colis_id: str,
    livreur_id: int,
    message: str,
    type: NotificationType | str = NotificationType.WARNING,
) -> DispatchResult:
    """Signale un problème sur un colis à tous les Admin et Gestionnaire."""
    try:
        livreur = utilisateur_crud.get_user(db, livreur_id)
        colis = db.get(Colis, colis_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Réclamation %s: lecture impossible (%s)", colis_id, exc)
        return DispatchResult(success=False, error="lookup_failed")

    if livreur is None:
        return DispatchResult(success=False, error="livreur_not_found")
    if colis is None:
        return DispatchResult(success=False, error="colis_not_found")

    return notify_roles(
        db,
        RECLAMATION_RECIPIENT_ROLES,
        title=f"Réclamation pour colis {colis_id}",
        message=f"{livreur.prenom} {livreur.nom} a signalé un problème: {message}",
        type=type,
        link=f"/colis/{colis_id}",
    )
