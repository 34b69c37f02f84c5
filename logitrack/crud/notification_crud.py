# Fichier: logitrack/crud/notification_crud.py

from datetime import datetime
from typing import Iterable, List

from sqlalchemy.orm import Session

from logitrack.models.user.notification_model import Notification


def create_notification(
    db: Session,
    *,
    user_id: int,
    title: str,
    message: str,
    type: str,
    link: str | None = None,
) -> Notification:
    """Crée une nouvelle notification non lue pour un utilisateur."""
    db_notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        link=link,
        is_read=False,
    )
    db.add(db_notification)
    db.commit()
    db.refresh(db_notification)
    return db_notification


def create_notifications(
    db: Session,
    *,
    user_ids: Iterable[int],
    title: str,
    message: str,
    type: str,
    link: str | None = None,
) -> List[Notification]:
    """Insère en une fois la même notification pour plusieurs utilisateurs."""
    rows = [
        Notification(user_id=user_id, title=title, message=message, type=type, link=link, is_read=False)
        for user_id in user_ids
    ]
    db.add_all(rows)
    db.commit()
    return rows


def get_notifications_by_user(db: Session, user_id: int, limit: int = 50) -> List[Notification]:
    """Récupère les notifications d'un utilisateur, les plus récentes en premier."""
    return db.query(Notification)\
             .filter(Notification.user_id == user_id)\
             .order_by(Notification.created_at.desc(), Notification.id.desc())\
             .limit(limit)\
             .all()


def mark_as_read(db: Session, notification_id: int, user_id: int, read_at: datetime) -> int:
    """Marque une notification comme lue ; renvoie le nombre de lignes touchées."""
    updated = db.query(Notification)\
                .filter(Notification.id == notification_id, Notification.user_id == user_id)\
                .update({"is_read": True, "read_at": read_at}, synchronize_session=False)
    db.commit()
    return updated


def mark_all_as_read(db: Session, user_id: int, read_at: datetime) -> int:
    """Marque toutes les notifications non lues d'un utilisateur comme lues."""
    updated = db.query(Notification)\
                .filter(Notification.user_id == user_id, Notification.is_read.is_(False))\
                .update({"is_read": True, "read_at": read_at}, synchronize_session=False)
    db.commit()
    return updated


def delete_notification(db: Session, notification_id: int, user_id: int) -> int:
    deleted = db.query(Notification)\
                .filter(Notification.id == notification_id, Notification.user_id == user_id)\
                .delete(synchronize_session=False)
    db.commit()
    return deleted
