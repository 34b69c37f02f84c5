# Fichier: logitrack/api/v1/endpoints/auth_router.py

import logging

from fastapi import APIRouter, Depends, Response, status

from logitrack.api.v1.dependencies import get_current_principal, get_session_store
from logitrack.auth.session_store import SessionStore
from logitrack.schemas.user.principal_schema import (
    LoginRequest,
    LoginResponse,
    Principal,
    SessionResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    store: SessionStore = Depends(get_session_store),
):
    """Ouvre une session : principal et marqueur signé sont posés en cookies."""
    result = store.login(payload.email, payload.password)
    if not result.success:
        response.status_code = status.HTTP_401_UNAUTHORIZED

    return LoginResponse(
        success=result.success,
        error=result.error,
        user=result.principal,
        access_token=result.access_token,
        toasts=store.toasts,
    )


@router.post("/logout", response_model=SessionResponse)
def logout(store: SessionStore = Depends(get_session_store)):
    # Pas d'invalidation côté serveur : le marqueur expire de lui-même.
    store.logout()
    return SessionResponse(user=None, toasts=store.toasts)


@router.get("/session", response_model=SessionResponse)
def read_session(store: SessionStore = Depends(get_session_store)):
    """Restaure la session stockée ; une session corrompue est effacée."""
    principal = store.restore()
    return SessionResponse(user=principal, toasts=store.toasts)


@router.get("/me", response_model=Principal)
def read_me(principal: Principal = Depends(get_current_principal)):
    return principal
