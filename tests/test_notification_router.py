from __future__ import annotations

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from logitrack.api.v1.dependencies import require_roles
from logitrack.api.v1.endpoints import notification_router
from logitrack.auth.route_access import ADMIN, GESTIONNAIRE
from logitrack.models.user.notification_model import Notification
from logitrack.notifications import inbox as inbox_module
from logitrack.notifications.inbox import NotificationInbox
from logitrack.schemas.user.notification_schema import (
    NotificationBroadcast,
    NotificationCreate,
    ReclamationCreate,
)
from logitrack.schemas.user.principal_schema import Principal
from tests.utils import create_colis, create_notification, create_user


@pytest.fixture()
def manager(db_session):
    return create_user(db_session, email="gest@example.com", role="Gestionnaire")


@pytest.fixture()
def principal(manager):
    return Principal.model_validate(manager)


def _inbox(db_session, principal):
    inbox = NotificationInbox(db_session, principal)
    inbox.fetch_notifications()
    return inbox


def test_read_notifications_returns_snapshot(db_session, manager, principal):
    create_notification(db_session, manager)

    snapshot = notification_router.read_notifications(inbox=_inbox(db_session, principal))

    assert snapshot.unread_count == 1
    assert len(snapshot.notifications) == 1


def test_create_then_mark_read(db_session, principal):
    inbox = _inbox(db_session, principal)

    snapshot = notification_router.create_notification(
        NotificationCreate(title="Rappel", message="Bons de retour à valider"), inbox=inbox
    )
    created_id = snapshot.notifications[0].id
    assert snapshot.unread_count == 1

    snapshot = notification_router.mark_notification_as_read(created_id, inbox=inbox)
    assert snapshot.unread_count == 0


def test_mark_unknown_notification_returns_404(db_session, principal):
    with pytest.raises(HTTPException) as exc:
        notification_router.mark_notification_as_read(12345, inbox=_inbox(db_session, principal))
    assert exc.value.status_code == 404
    assert exc.value.detail == "notification_not_found"


def test_delete_unknown_notification_returns_404(db_session, principal):
    with pytest.raises(HTTPException) as exc:
        notification_router.delete_notification(12345, inbox=_inbox(db_session, principal))
    assert exc.value.status_code == 404


def test_inbox_error_is_reported_as_503(db_session, principal):
    inbox = _inbox(db_session, principal)
    inbox.error = "Failed to fetch notifications"

    with pytest.raises(HTTPException) as exc:
        notification_router.read_notifications(inbox=inbox)
    assert exc.value.status_code == 503


def test_broadcast_to_role(db_session, principal):
    livreur = create_user(db_session, email="livreur@example.com", role="livreur")

    result = notification_router.broadcast_notification(
        NotificationBroadcast(title="Tournée", message="Départ à 8h", role="LIVREUR"),
        db=db_session,
        principal=principal,
    )

    assert result.success is True
    assert result.count == 1
    assert db_session.query(Notification).filter_by(user_id=livreur.id).count() == 1


def test_broadcast_requires_recipients(db_session, principal):
    with pytest.raises(HTTPException) as exc:
        notification_router.broadcast_notification(
            NotificationBroadcast(title="Titre", message="Message"), db=db_session, principal=principal
        )
    assert exc.value.detail == "recipients_required"


def test_broadcast_rejects_unknown_role(db_session, principal):
    with pytest.raises(HTTPException) as exc:
        notification_router.broadcast_notification(
            NotificationBroadcast(title="Titre", message="Message", role="Stagiaire"),
            db=db_session,
            principal=principal,
        )
    assert exc.value.status_code == 400
    assert exc.value.detail == "unknown_role"


def test_broadcast_is_limited_to_staff(db_session):
    livreur = Principal.model_validate(create_user(db_session, email="livreur@example.com", role="Livreur"))
    dependency = require_roles(ADMIN, GESTIONNAIRE)

    with pytest.raises(HTTPException) as exc:
        dependency(principal=livreur)
    assert exc.value.status_code == 403
    assert exc.value.detail == "access_denied"


def test_reclamation_from_livreur(db_session, manager):
    livreur = create_user(db_session, email="livreur@example.com", role="Livreur")
    create_colis(db_session, "C-7")

    result = notification_router.create_reclamation(
        ReclamationCreate(colis_id="C-7", message="Adresse introuvable"),
        db=db_session,
        principal=Principal.model_validate(livreur),
    )

    assert result.count == 1
    assert db_session.query(Notification).filter_by(user_id=manager.id).one().link == "/colis/C-7"


def test_reclamation_for_missing_colis_returns_404(db_session, principal):
    with pytest.raises(HTTPException) as exc:
        notification_router.create_reclamation(
            ReclamationCreate(colis_id="NOPE", message="?"), db=db_session, principal=principal
        )
    assert exc.value.status_code == 404


def _inbox_with_failed_fetch(db_session, principal, monkeypatch):
    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(inbox_module.notification_crud, "get_notifications_by_user", boom)
    return _inbox(db_session, principal)


def test_create_is_refused_when_inbox_could_not_load(db_session, principal, monkeypatch):
    inbox = _inbox_with_failed_fetch(db_session, principal, monkeypatch)

    with pytest.raises(HTTPException) as exc:
        notification_router.create_notification(NotificationCreate(title="Titre", message="Message"), inbox=inbox)

    assert exc.value.status_code == 503
    assert db_session.query(Notification).count() == 0


def test_mark_read_is_refused_when_inbox_could_not_load(db_session, manager, principal, monkeypatch):
    target = create_notification(db_session, manager)
    inbox = _inbox_with_failed_fetch(db_session, principal, monkeypatch)

    with pytest.raises(HTTPException) as exc:
        notification_router.mark_notification_as_read(target.id, inbox=inbox)

    assert exc.value.status_code == 503
    db_session.expire_all()
    assert db_session.get(Notification, target.id).is_read is False


def test_delete_and_read_all_are_refused_when_inbox_could_not_load(db_session, manager, principal, monkeypatch):
    target = create_notification(db_session, manager)
    inbox = _inbox_with_failed_fetch(db_session, principal, monkeypatch)

    with pytest.raises(HTTPException):
        notification_router.delete_notification(target.id, inbox=inbox)
    with pytest.raises(HTTPException):
        notification_router.mark_all_notifications_as_read(inbox=inbox)

    db_session.expire_all()
    assert db_session.get(Notification, target.id).is_read is False
