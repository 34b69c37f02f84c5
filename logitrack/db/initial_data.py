"""Données minimales créées au démarrage."""

from __future__ import annotations

import logging
import secrets

from sqlalchemy.orm import Session

from logitrack.core.config import Settings
from logitrack.crud import utilisateur_crud
from logitrack.models.user.utilisateur_model import UserRole, Utilisateur

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session, settings: Settings) -> Utilisateur:
    """Crée l'administrateur par défaut s'il n'existe pas encore.

    Sans ``DEFAULT_ADMIN_PASSWORD``, un mot de passe aléatoire est généré et
    journalisé une seule fois.
    """
    admin = utilisateur_crud.get_user_by_email(db, email=settings.DEFAULT_ADMIN_EMAIL)
    if admin is not None:
        logger.info("Administrateur par défaut déjà présent.")
        return admin

    password = settings.DEFAULT_ADMIN_PASSWORD
    if not password:
        password = secrets.token_urlsafe(12)
        logger.warning(
            "DEFAULT_ADMIN_PASSWORD absent: mot de passe généré pour %s: %s",
            settings.DEFAULT_ADMIN_EMAIL,
            password,
        )

    logger.info("Création de l'administrateur par défaut '%s'.", settings.DEFAULT_ADMIN_EMAIL)
    return utilisateur_crud.create_user(
        db,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=password,
        nom="Administrateur",
        prenom="LogiTrack",
        role=UserRole.ADMIN.value,
    )
