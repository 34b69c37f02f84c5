from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from logitrack.db.base_class import Base


class Colis(Base):
    __tablename__ = "colis"

    # Identifiant lisible, ex: COL-2025-0001
    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    adresse_livraison: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    statut: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    client_id: Mapped[Optional[str]] = mapped_column(ForeignKey("clients.id"), nullable=True)
    livreur_id: Mapped[Optional[str]] = mapped_column(ForeignKey("livreurs.id"), nullable=True)
    date_creation: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
