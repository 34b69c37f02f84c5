# Fichier: logitrack/api/v1/endpoints/access_router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from logitrack.api.v1.dependencies import get_optional_principal
from logitrack.auth.route_access import RouteGate, navigation_for
from logitrack.schemas.access_schema import GateDecisionRead, NavigationRead
from logitrack.schemas.user.principal_schema import Principal

router = APIRouter()


@router.get("/check", response_model=GateDecisionRead, summary="Décision de la garde pour une route du front")
def check_route(
    path: str = Query(..., min_length=1),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    """Appelée par le front à chaque navigation et à chaque changement d'utilisateur."""
    decision = RouteGate().evaluate(path, principal)
    return GateDecisionRead(
        path=decision.path,
        state=decision.state,
        redirect_to=decision.redirect_to,
        toasts=decision.toasts,
    )


@router.get("/navigation", response_model=NavigationRead, summary="Routes visibles dans le menu")
def read_navigation(principal: Optional[Principal] = Depends(get_optional_principal)):
    return NavigationRead(paths=navigation_for(principal))
