# Fichier: logitrack/schemas/user/notification_schema.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from logitrack.models.user.notification_model import NotificationType

# Schéma de base
class NotificationBase(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.INFO
    link: str | None = None

# Schéma pour la création par l'utilisateur courant
class NotificationCreate(NotificationBase):
    pass

# Schéma pour la lecture (envoyé au client)
class NotificationRead(NotificationBase):
    id: int
    user_id: int
    is_read: bool
    created_at: datetime | None = None
    read_at: datetime | None = None

    class Config:
        from_attributes = True

# État de la boîte de réception renvoyé après chaque action
class InboxSnapshot(BaseModel):
    notifications: List[NotificationRead]
    unread_count: int
    error: Optional[str] = None

# Diffusion à un rôle ou à une liste d'utilisateurs
class NotificationBroadcast(NotificationBase):
    role: Optional[str] = None
    user_ids: List[int] = []

class ReclamationCreate(BaseModel):
    colis_id: str
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.WARNING

class DispatchResultRead(BaseModel):
    success: bool
    count: int = 0
    error: Optional[str] = None
