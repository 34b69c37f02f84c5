# Fichier: logitrack/api/v1/endpoints/search_router.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from logitrack.api.v1.dependencies import get_db, require_route_access
from logitrack.auth.route_access import HOME_PATH
from logitrack.schemas.search_schema import SearchResult
from logitrack.schemas.user.principal_schema import Principal
from logitrack.services.search_service import search_all

router = APIRouter()


@router.get("", response_model=List[SearchResult], summary="Recherche globale (enregistrements récents)")
def search(
    q: str = Query("", max_length=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route_access(HOME_PATH)),
):
    return search_all(db, q)
