from sqlalchemy import Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from logitrack.db.base_class import Base
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
import enum

if TYPE_CHECKING:
    from .notification_model import Notification


class UserRole(str, enum.Enum):
    ADMIN = "Admin"
    GESTIONNAIRE = "Gestionnaire"
    LIVREUR = "Livreur"


class UserStatus(str, enum.Enum):
    ACTIF = "Actif"
    INACTIF = "Inactif"


class Utilisateur(Base):
    __tablename__ = "utilisateurs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    nom: Mapped[str] = mapped_column(String(100), nullable=False)
    prenom: Mapped[str] = mapped_column(String(100), nullable=False)
    telephone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Le rôle est stocké tel quel : la casse est normalisée à la connexion.
    role: Mapped[str] = mapped_column(String(30), nullable=False, default=UserRole.LIVREUR.value)
    statut: Mapped[str] = mapped_column(String(20), nullable=False, default=UserStatus.ACTIF.value)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)

    derniere_connexion: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    date_creation: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    date_modification: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    notifications: Mapped[List["Notification"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_active(self) -> bool:
        return self.statut == UserStatus.ACTIF.value

    def __repr__(self):
        return f"<Utilisateur(id={self.id}, email='{self.email}', role='{self.role}')>"
