# Fichier: logitrack/models/user/notification_model.py

import enum
from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from logitrack.db.base_class import Base
from logitrack.models.user.utilisateur_model import Utilisateur  # noqa: F401

class NotificationType(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("utilisateurs.id"), nullable=False, index=True)

    # Colonne nommée "type" dans la table d'origine
    type = Column(String(20), nullable=False, default=NotificationType.INFO.value)

    title = Column(String, nullable=False)
    message = Column(String, nullable=False)

    # Lien vers la page concernée (ex: /colis/COL-2025-0001)
    link = Column(String, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("Utilisateur", back_populates="notifications")
