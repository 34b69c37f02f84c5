"""Déclare l'ensemble des modèles SQLAlchemy pour la création des tables."""

from logitrack.db.base_class import Base

# Utilisateurs et notifications
from logitrack.models.user.utilisateur_model import Utilisateur
from logitrack.models.user.notification_model import Notification

# Entités logistiques consultées par la recherche
from logitrack.models.logistics.colis_model import Colis
from logitrack.models.logistics.client_model import Client
from logitrack.models.logistics.livreur_model import Livreur
from logitrack.models.logistics.entreprise_model import Entreprise

__all__ = (
    "Base",
    "Utilisateur",
    "Notification",
    "Colis",
    "Client",
    "Livreur",
    "Entreprise",
)
