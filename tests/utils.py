"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache

from logitrack.core.security import get_password_hash
from logitrack.models.logistics.client_model import Client
from logitrack.models.logistics.colis_model import Colis
from logitrack.models.logistics.entreprise_model import Entreprise
from logitrack.models.logistics.livreur_model import Livreur
from logitrack.models.user.notification_model import Notification
from logitrack.models.user.utilisateur_model import Utilisateur

DEFAULT_PASSWORD = "motdepasse"


@lru_cache(maxsize=1)
def _default_hash() -> str:
    return get_password_hash(DEFAULT_PASSWORD)


def create_user(db, **kwargs) -> Utilisateur:
    defaults = {
        "email": "user@example.com",
        "nom": "Dupont",
        "prenom": "Jean",
        "role": "Gestionnaire",
        "statut": "Actif",
        "hashed_password": _default_hash(),
    }
    defaults.update(kwargs)
    user = Utilisateur(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_notification(db, user, *, minutes_ago: int = 0, **kwargs) -> Notification:
    defaults = {
        "user_id": user.id,
        "title": "Titre",
        "message": "Message",
        "type": "info",
        "is_read": False,
        "created_at": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    }
    defaults.update(kwargs)
    notification = Notification(**defaults)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def _ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


def create_colis(db, id: str, *, minutes_ago: int = 0, **kwargs) -> Colis:
    colis = Colis(id=id, date_creation=_ago(minutes_ago), **kwargs)
    db.add(colis)
    db.commit()
    return colis


def create_client(db, id: str, *, minutes_ago: int = 0, **kwargs) -> Client:
    client = Client(id=id, date_creation=_ago(minutes_ago), **kwargs)
    db.add(client)
    db.commit()
    return client


def create_livreur(db, id: str, *, minutes_ago: int = 0, **kwargs) -> Livreur:
    livreur = Livreur(id=id, date_creation=_ago(minutes_ago), **kwargs)
    db.add(livreur)
    db.commit()
    return livreur


def create_entreprise(db, id: str, *, minutes_ago: int = 0, **kwargs) -> Entreprise:
    entreprise = Entreprise(id=id, date_creation=_ago(minutes_ago), **kwargs)
    db.add(entreprise)
    db.commit()
    return entreprise
