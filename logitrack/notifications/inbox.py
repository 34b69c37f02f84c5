"""Boîte de réception des notifications d'un principal.

Chaque mutation est d'abord persistée, puis recopiée dans l'état local
(``notifications`` et ``unread_count``). L'ordre local est celui renvoyé par
la base (plus récentes en premier) ; aucune mutation ne le retrie.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from logitrack.core.config import Settings, settings as default_settings
from logitrack.crud import notification_crud
from logitrack.models.user.notification_model import NotificationType
from logitrack.schemas.user.notification_schema import InboxSnapshot, NotificationRead
from logitrack.schemas.user.principal_schema import Principal

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationInbox:
    """État des notifications d'un utilisateur et opérations associées."""

    def __init__(self, db: Session, principal: Optional[Principal], *, settings: Settings = default_settings):
        self.db = db
        self.principal = principal
        self.fetch_limit = settings.NOTIFICATION_FETCH_LIMIT
        self.notifications: List[NotificationRead] = []
        self.unread_count = 0
        self.loading = False
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------
    def fetch_notifications(self) -> None:
        if self.principal is None:
            return

        self.loading = True
        self.error = None
        try:
            rows = notification_crud.get_notifications_by_user(
                self.db, user_id=self.principal.id, limit=self.fetch_limit
            )
            notifications = [NotificationRead.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            self._record_failure("Failed to fetch notifications", exc)
            return
        finally:
            self.loading = False

        self.notifications = notifications
        self.unread_count = sum(1 for notification in notifications if not notification.is_read)

    def snapshot(self) -> InboxSnapshot:
        return InboxSnapshot(
            notifications=list(self.notifications),
            unread_count=self.unread_count,
            error=self.error,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def mark_as_read(self, notification_id: int) -> bool:
        if self.principal is None:
            return False

        now = _utcnow()
        try:
            updated = notification_crud.mark_as_read(
                self.db, notification_id=notification_id, user_id=self.principal.id, read_at=now
            )
        except SQLAlchemyError as exc:
            self._record_failure("Failed to mark notification as read", exc)
            return False

        if not updated:
            return False

        was_unread = False
        for index, notification in enumerate(self.notifications):
            if notification.id == notification_id:
                was_unread = not notification.is_read
                # read_at est réécrit même si la notification était déjà lue.
                self.notifications[index] = notification.model_copy(update={"is_read": True, "read_at": now})
        if was_unread:
            self.unread_count = max(0, self.unread_count - 1)
        return True

    def mark_all_as_read(self) -> bool:
        if self.principal is None or not self.notifications:
            return False

        now = _utcnow()
        try:
            notification_crud.mark_all_as_read(self.db, user_id=self.principal.id, read_at=now)
        except SQLAlchemyError as exc:
            self._record_failure("Failed to mark all notifications as read", exc)
            return False

        self.notifications = [
            notification.model_copy(
                update={"is_read": True, "read_at": notification.read_at if notification.is_read else now}
            )
            for notification in self.notifications
        ]
        self.unread_count = 0
        return True

    def delete_notification(self, notification_id: int) -> bool:
        if self.principal is None:
            return False

        try:
            deleted = notification_crud.delete_notification(
                self.db, notification_id=notification_id, user_id=self.principal.id
            )
        except SQLAlchemyError as exc:
            self._record_failure("Failed to delete notification", exc)
            return False

        if not deleted:
            return False

        was_unread = any(n.id == notification_id and not n.is_read for n in self.notifications)
        self.notifications = [n for n in self.notifications if n.id != notification_id]
        if was_unread:
            self.unread_count = max(0, self.unread_count - 1)
        return True

    def create_notification(
        self,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.INFO,
        link: Optional[str] = None,
    ) -> Optional[NotificationRead]:
        if self.principal is None:
            return None

        kind = NotificationType(type).value
        try:
            row = notification_crud.create_notification(
                self.db,
                user_id=self.principal.id,
                title=title,
                message=message,
                type=kind,
                link=link,
            )
            created = NotificationRead.model_validate(row)
        except SQLAlchemyError as exc:
            self._record_failure("Failed to create notification", exc)
            return None

        self.notifications.insert(0, created)
        self.unread_count += 1
        return created

    def _record_failure(self, message: str, exc: Exception) -> None:
        self.db.rollback()
        logger.warning("%s (utilisateur %s): %s", message, self.principal.id if self.principal else None, exc)
        self.error = message
