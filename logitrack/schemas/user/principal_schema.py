# Fichier: logitrack/schemas/user/principal_schema.py
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, field_validator

from logitrack.auth.roles import normalize_role
from logitrack.models.user.utilisateur_model import UserStatus
from logitrack.schemas.toast_schema import Toast


# --- Utilisateur authentifié ---
# Copie sérialisable conservée en mémoire et dans le stockage de session.
class Principal(BaseModel):
    id: int
    email: str
    prenom: str
    nom: str
    role: str
    statut: UserStatus

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> str:
        return normalize_role(value)


# --- Corps de la requête POST /auth/login ---
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# --- Réponses ---
class LoginResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    user: Optional[Principal] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"
    toasts: List[Toast] = []


class SessionResponse(BaseModel):
    user: Optional[Principal] = None
    toasts: List[Toast] = []
