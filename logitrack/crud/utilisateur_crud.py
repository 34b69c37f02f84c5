# Fichier: logitrack/crud/utilisateur_crud.py

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from logitrack.core.security import get_password_hash
from logitrack.models.user.utilisateur_model import UserStatus, Utilisateur


def get_user(db: Session, user_id: int) -> Optional[Utilisateur]:
    return db.get(Utilisateur, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[Utilisateur]:
    """
    Récupère un utilisateur par son adresse email.

    Args:
        db: La session de base de données.
        email: L'email de l'utilisateur à rechercher.

    Returns:
        L'objet Utilisateur s'il est trouvé, sinon None.
    """
    return db.query(Utilisateur).filter(Utilisateur.email == email).first()


def get_active_user_by_email(db: Session, email: str) -> Optional[Utilisateur]:
    """Récupère l'unique utilisateur actif portant cet email."""
    return (
        db.query(Utilisateur)
        .filter(Utilisateur.email == email, Utilisateur.statut == UserStatus.ACTIF.value)
        .one_or_none()
    )


def get_user_ids_by_roles(db: Session, roles: Iterable[str]) -> List[int]:
    """Identifiants des utilisateurs dont le rôle (casse ignorée) est dans ``roles``."""
    wanted = [role.lower() for role in roles]
    rows = db.query(Utilisateur.id).filter(func.lower(Utilisateur.role).in_(wanted)).order_by(Utilisateur.id).all()
    return [row.id for row in rows]


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    nom: str,
    prenom: str,
    role: str,
    statut: str = UserStatus.ACTIF.value,
    telephone: Optional[str] = None,
) -> Utilisateur:
    """Crée un utilisateur avec un mot de passe haché."""
    db_user = Utilisateur(
        email=email,
        nom=nom,
        prenom=prenom,
        role=role,
        statut=statut,
        telephone=telephone,
        hashed_password=get_password_hash(password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def set_password(db: Session, user: Utilisateur, password: str) -> Utilisateur:
    user.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(user)
    return user


def touch_last_login(db: Session, user: Utilisateur, when: datetime) -> None:
    """Enregistre la date de dernière connexion."""
    user.derniere_connexion = when
    db.commit()
