# Fichier: logitrack/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from jose import ExpiredSignatureError, JWTError, jwt
from passlib import exc as passlib_exc
from passlib.context import CryptContext

from logitrack.core.config import settings

# --- Configuration de la Sécurité ---
ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Levée lorsqu'un marqueur de session est absent, expiré ou falsifié."""

    def __init__(self, reason: str = "invalid_token"):
        super().__init__(reason)
        self.reason = reason


# --- Fonctions Utilitaires ---
def create_access_token(
    subject: Union[str, Any],
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Crée le marqueur de session signé (JWT)."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS)

    to_encode: dict[str, Any] = {"exp": expire, "sub": str(subject)}
    if role is not None:
        to_encode["role"] = role
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str | None) -> dict[str, Any]:
    """Décode et valide un marqueur de session.

    Raises:
        InvalidTokenError: ``token_expired`` si le jeton a expiré,
            ``invalid_token`` s'il est absent, mal formé ou sans ``sub``.
    """
    if not token:
        raise InvalidTokenError()

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise InvalidTokenError("token_expired") from exc
    except JWTError as exc:
        raise InvalidTokenError() from exc

    if payload.get("sub") is None:
        raise InvalidTokenError()
    return payload


def verify_password(plain_password: str | None, hashed_password: str | None) -> bool:
    """Vérifie si un mot de passe en clair correspond à un mot de passe haché."""

    if not plain_password or not hashed_password:
        return False

    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError, passlib_exc.UnknownHashError) as exc:
        logger.warning("Password verification failed: %s", exc)
        return False


def get_password_hash(password: str) -> str:
    """Hache un mot de passe."""
    return pwd_context.hash(password)
