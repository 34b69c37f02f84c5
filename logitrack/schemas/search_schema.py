# Fichier: logitrack/schemas/search_schema.py

import enum

from pydantic import BaseModel


class SearchCategory(str, enum.Enum):
    COLIS = "colis"
    CLIENT = "client"
    LIVREUR = "livreur"
    ENTREPRISE = "entreprise"


class SearchResult(BaseModel):
    id: str
    type: SearchCategory
    title: str
    subtitle: str
    url: str
