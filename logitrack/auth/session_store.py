"""Session store: connexion, déconnexion et restauration du principal.

Le principal est gardé en mémoire et recopié (JSON) dans un stockage de
session persistant ; un marqueur de session signé d'une durée de 24h indique
qu'une session existe. Chaque action qui change l'état émet un toast.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from fastapi import Request, Response
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from logitrack.auth.roles import role_in
from logitrack.core import security
from logitrack.core.config import Settings, settings as default_settings
from logitrack.crud import utilisateur_crud
from logitrack.schemas.toast_schema import Toast, ToastType
from logitrack.schemas.user.principal_schema import Principal

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Identifiants incorrects ou compte inactif"
LOGIN_ERROR_MESSAGE = "Une erreur est survenue lors de la connexion"
LOGOUT_MESSAGE = "Vous avez été déconnecté avec succès."


class SessionStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, max_age: Optional[int] = None) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySessionStorage:
    """Stockage en mémoire (tests, scripts)."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.values: dict[str, str] = dict(initial or {})
        self.max_ages: dict[str, Optional[int]] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str, max_age: Optional[int] = None) -> None:
        self.values[key] = value
        self.max_ages[key] = max_age

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
        self.max_ages.pop(key, None)


class CookieSessionStorage:
    """Lit les cookies de la requête et écrit ceux de la réponse.

    Seul le marqueur de session est ``httponly`` : la copie du principal reste
    lisible par le front pour l'affichage.
    """

    def __init__(self, request: Request, response: Response, *, secure: bool = False, httponly_keys: Iterable[str] = ()):
        self._request = request
        self._response = response
        self._secure = secure
        self._httponly_keys = set(httponly_keys)
        # Les écritures de cette requête priment sur les cookies reçus.
        self._pending: dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key]
        return self._request.cookies.get(key)

    def set(self, key: str, value: str, max_age: Optional[int] = None) -> None:
        self._pending[key] = value
        self._response.set_cookie(
            key=key,
            value=value,
            max_age=max_age,
            path="/",
            httponly=key in self._httponly_keys,
            samesite="lax",
            secure=self._secure,
        )

    def delete(self, key: str) -> None:
        self._pending[key] = None
        self._response.delete_cookie(key=key, path="/", samesite="lax", secure=self._secure)


@dataclass
class LoginResult:
    success: bool
    error: Optional[str] = None
    principal: Optional[Principal] = None
    access_token: Optional[str] = None


class SessionStore:
    """Contexte de session explicite, construit par requête."""

    def __init__(self, db: Session, storage: SessionStorage, *, settings: Settings = default_settings):
        self.db = db
        self.storage = storage
        self.settings = settings
        self.principal: Optional[Principal] = None
        self.toasts: list[Toast] = []

    @property
    def user_key(self) -> str:
        return self.settings.SESSION_USER_KEY

    @property
    def marker_key(self) -> str:
        return self.settings.SESSION_COOKIE_NAME

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> LoginResult:
        try:
            user = utilisateur_crud.get_active_user_by_email(self.db, email=email)
            if user is None or not security.verify_password(password, user.hashed_password):
                return self._fail(INVALID_CREDENTIALS_MESSAGE)

            try:
                principal = Principal.model_validate(user)
            except ValidationError as exc:
                logger.warning("Connexion refusée pour %s: rôle invalide (%s)", email, user.role)
                logger.debug("Détail de validation: %s", exc)
                return self._fail(INVALID_CREDENTIALS_MESSAGE)

            utilisateur_crud.touch_last_login(self.db, user, datetime.now(timezone.utc))
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Erreur lors de la connexion de %s: %s", email, exc)
            return self._fail(LOGIN_ERROR_MESSAGE)

        access_token = security.create_access_token(subject=principal.id, role=principal.role)
        self._persist(principal, access_token)
        self._toast(f"Bienvenue, {principal.prenom} {principal.nom}!", ToastType.SUCCESS)
        logger.info("Utilisateur %s connecté (%s).", principal.id, principal.role)
        return LoginResult(success=True, principal=principal, access_token=access_token)

    def logout(self) -> None:
        self._clear()
        self._toast(LOGOUT_MESSAGE, ToastType.SUCCESS)

    def restore(self) -> Optional[Principal]:
        """Reconstruit la session depuis le stockage.

        Sans marqueur il n'y a pas de session. Un marqueur sans principal
        stocké, un JSON illisible, un marqueur invalide ou un principal dont
        l'identifiant ou le rôle diffère de celui du marqueur forcent la
        déconnexion.
        """
        marker = self.storage.get(self.marker_key)
        if not marker:
            if self.storage.get(self.user_key) is not None:
                self.storage.delete(self.user_key)
            self.principal = None
            return None

        stored = self.storage.get(self.user_key)
        if not stored:
            logger.warning("Marqueur de session sans utilisateur stocké: déconnexion forcée.")
            self._clear()
            return None

        try:
            claims = security.decode_access_token(marker)
            principal = Principal.model_validate(json.loads(stored))
        except (security.InvalidTokenError, json.JSONDecodeError, ValidationError, TypeError) as exc:
            logger.warning("Session stockée invalide (%s): déconnexion forcée.", exc)
            self._clear()
            return None

        if str(principal.id) != str(claims.get("sub")):
            logger.warning("Le marqueur ne correspond pas à l'utilisateur stocké: déconnexion forcée.")
            self._clear()
            return None

        role_claim = claims.get("role")
        if not isinstance(role_claim, str) or not role_in(role_claim, {principal.role}):
            logger.warning("Le rôle stocké ne correspond pas au marqueur: déconnexion forcée.")
            self._clear()
            return None

        self.principal = principal
        return principal

    def has_access(self, roles: Iterable[str]) -> bool:
        if self.principal is None or not self.principal.role:
            return False
        return role_in(self.principal.role, roles)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _persist(self, principal: Principal, access_token: str) -> None:
        self.principal = principal
        self.storage.set(self.user_key, principal.model_dump_json())
        self.storage.set(self.marker_key, access_token, max_age=self.settings.SESSION_MAX_AGE_SECONDS)

    def _clear(self) -> None:
        self.principal = None
        self.storage.delete(self.user_key)
        self.storage.delete(self.marker_key)

    def _fail(self, message: str) -> LoginResult:
        self._toast(message, ToastType.ERROR)
        return LoginResult(success=False, error=message)

    def _toast(self, message: str, toast_type: ToastType) -> None:
        self.toasts.append(Toast(message=message, type=toast_type))
