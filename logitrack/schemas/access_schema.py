# Fichier: logitrack/schemas/access_schema.py
from typing import List, Optional

from pydantic import BaseModel

from logitrack.auth.route_access import GateState
from logitrack.schemas.toast_schema import Toast


class GateDecisionRead(BaseModel):
    path: str
    state: GateState
    redirect_to: Optional[str] = None
    toasts: List[Toast] = []


class NavigationRead(BaseModel):
    paths: List[str]
