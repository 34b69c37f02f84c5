"""Recherche globale sur les colis, clients, livreurs et entreprises.

Chaque catégorie charge ses ``SEARCH_FETCH_LIMIT`` lignes les plus récentes
puis filtre en mémoire (sous-chaîne, casse ignorée). La recherche ne voit donc
que les enregistrements récents de chaque table. Une catégorie en échec est
ignorée sans interrompre les autres.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from logitrack.core.config import Settings, settings as default_settings
from logitrack.models.logistics.client_model import Client
from logitrack.models.logistics.colis_model import Colis
from logitrack.models.logistics.entreprise_model import Entreprise
from logitrack.models.logistics.livreur_model import Livreur
from logitrack.schemas.search_schema import SearchCategory, SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchTarget:
    category: SearchCategory
    model: Type[Any]
    fields: Sequence[str]
    to_result: Callable[[Any], SearchResult]


def _colis_result(colis: Colis) -> SearchResult:
    return SearchResult(
        id=colis.id,
        type=SearchCategory.COLIS,
        title=colis.id,
        subtitle=f"{colis.adresse_livraison or 'Adresse non spécifiée'} • {colis.statut or 'Statut non spécifié'}",
        url=f"/colis/{colis.id}",
    )


def _client_result(client: Client) -> SearchResult:
    return SearchResult(
        id=client.id,
        type=SearchCategory.CLIENT,
        title=client.nom or "Client sans nom",
        subtitle=client.telephone or client.email or "Client",
        url=f"/clients/{client.id}",
    )


def _livreur_result(livreur: Livreur) -> SearchResult:
    return SearchResult(
        id=livreur.id,
        type=SearchCategory.LIVREUR,
        title=livreur.nom or "Livreur sans nom",
        subtitle=livreur.zone or livreur.telephone or "Livreur",
        url=f"/livreurs/{livreur.id}",
    )


def _entreprise_result(entreprise: Entreprise) -> SearchResult:
    return SearchResult(
        id=entreprise.id,
        type=SearchCategory.ENTREPRISE,
        title=entreprise.nom or "Entreprise sans nom",
        subtitle=entreprise.description or "Entreprise",
        url=f"/entreprises/{entreprise.id}",
    )


SEARCH_TARGETS: tuple[SearchTarget, ...] = (
    SearchTarget(SearchCategory.COLIS, Colis, ("id", "adresse_livraison"), _colis_result),
    SearchTarget(SearchCategory.CLIENT, Client, ("nom", "telephone", "email"), _client_result),
    SearchTarget(SearchCategory.LIVREUR, Livreur, ("nom", "telephone", "email", "zone"), _livreur_result),
    SearchTarget(
        SearchCategory.ENTREPRISE, Entreprise, ("nom", "telephone", "email", "description"), _entreprise_result
    ),
)


def _matches(row: Any, fields: Sequence[str], needle: str) -> bool:
    for name in fields:
        value = getattr(row, name, None)
        if value and needle in str(value).lower():
            return True
    return False


def _search_target(db: Session, target: SearchTarget, needle: str, fetch_limit: int, category_limit: int) -> List[SearchResult]:
    rows = (
        db.query(target.model)
        .order_by(target.model.date_creation.desc())
        .limit(fetch_limit)
        .all()
    )
    matching = [row for row in rows if _matches(row, target.fields, needle)][:category_limit]
    return [target.to_result(row) for row in matching]


def search_all(db: Session, query: str | None, *, settings: Settings = default_settings) -> List[SearchResult]:
    """Résultats de toutes les catégories, à la suite, sans classement global."""
    if not query or len(query.strip()) < settings.SEARCH_MIN_QUERY_LENGTH:
        return []

    # Le terme n'est pas tronqué : seul le contrôle de longueur utilise strip().
    needle = query.lower()
    results: List[SearchResult] = []

    for target in SEARCH_TARGETS:
        try:
            results.extend(
                _search_target(
                    db,
                    target,
                    needle,
                    fetch_limit=settings.SEARCH_FETCH_LIMIT,
                    category_limit=settings.SEARCH_CATEGORY_LIMIT,
                )
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.debug("Recherche %s ignorée: %s", target.category.value, exc)

    return results
