# Fichier: logitrack/api/v1/endpoints/notification_router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from logitrack.api.v1.dependencies import get_current_principal, get_db, get_inbox, require_roles
from logitrack.auth.route_access import ADMIN, GESTIONNAIRE
from logitrack.models.user.utilisateur_model import UserRole
from logitrack.notifications import dispatch
from logitrack.notifications.inbox import NotificationInbox
from logitrack.schemas.user import notification_schema
from logitrack.schemas.user.principal_schema import Principal

router = APIRouter()


def _ensure_loaded(inbox: NotificationInbox) -> None:
    # Aucune écriture si la boîte n'a pas pu être chargée.
    if inbox.error:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=inbox.error)


def _snapshot_or_error(inbox: NotificationInbox) -> notification_schema.InboxSnapshot:
    _ensure_loaded(inbox)
    return inbox.snapshot()


@router.get("/", response_model=notification_schema.InboxSnapshot, summary="Lister les notifications de l'utilisateur")
def read_notifications(inbox: NotificationInbox = Depends(get_inbox)):
    """Les 50 notifications les plus récentes et le compteur de non lues."""
    return _snapshot_or_error(inbox)


@router.get("/unread-count", response_model=dict, summary="Compter les notifications non lues")
def get_unread_count(inbox: NotificationInbox = Depends(get_inbox)):
    _snapshot_or_error(inbox)
    return {"unread_count": inbox.unread_count}


@router.post("/", response_model=notification_schema.InboxSnapshot, status_code=status.HTTP_201_CREATED, summary="Créer une notification pour soi")
def create_notification(
    payload: notification_schema.NotificationCreate,
    inbox: NotificationInbox = Depends(get_inbox),
):
    _ensure_loaded(inbox)
    inbox.create_notification(payload.title, payload.message, payload.type, payload.link)
    return _snapshot_or_error(inbox)


@router.post("/read-all", response_model=notification_schema.InboxSnapshot, summary="Marquer toutes les notifications comme lues")
def mark_all_notifications_as_read(inbox: NotificationInbox = Depends(get_inbox)):
    _ensure_loaded(inbox)
    inbox.mark_all_as_read()
    return _snapshot_or_error(inbox)


@router.post("/{notification_id}/read", response_model=notification_schema.InboxSnapshot, summary="Marquer une notification comme lue")
def mark_notification_as_read(notification_id: int, inbox: NotificationInbox = Depends(get_inbox)):
    _ensure_loaded(inbox)
    if not inbox.mark_as_read(notification_id):
        _snapshot_or_error(inbox)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="notification_not_found")
    return _snapshot_or_error(inbox)


@router.delete("/{notification_id}", response_model=notification_schema.InboxSnapshot, summary="Supprimer une notification")
def delete_notification(notification_id: int, inbox: NotificationInbox = Depends(get_inbox)):
    _ensure_loaded(inbox)
    if not inbox.delete_notification(notification_id):
        _snapshot_or_error(inbox)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="notification_not_found")
    return _snapshot_or_error(inbox)


@router.post("/broadcast", response_model=notification_schema.DispatchResultRead, summary="Notifier un rôle ou une liste d'utilisateurs")
def broadcast_notification(
    payload: notification_schema.NotificationBroadcast,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(ADMIN, GESTIONNAIRE)),
):
    if payload.role is None and not payload.user_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="recipients_required")

    options = dict(title=payload.title, message=payload.message, type=payload.type, link=payload.link)
    if payload.role is not None:
        result = dispatch.notify_role(db, payload.role, **options)
    else:
        result = dispatch.notify_users(db, payload.user_ids, **options)

    if not result.success and result.error == "unknown_role":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    return notification_schema.DispatchResultRead(success=result.success, count=result.count, error=result.error)


@router.post("/reclamations", response_model=notification_schema.DispatchResultRead, summary="Signaler un problème sur un colis")
def create_reclamation(
    payload: notification_schema.ReclamationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(UserRole.LIVREUR.value, ADMIN, GESTIONNAIRE)),
):
    result = dispatch.notify_reclamation(
        db,
        colis_id=payload.colis_id,
        livreur_id=principal.id,
        message=payload.message,
        type=payload.type,
    )
    if result.error == "colis_not_found":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    return notification_schema.DispatchResultRead(success=result.success, count=result.count, error=result.error)
