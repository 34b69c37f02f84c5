import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Imports de l'application
from logitrack.core.config import settings
from logitrack.db import base as db_base
from logitrack.api.v1.api import api_router
from logitrack.db import session as db_session
from logitrack.db.initial_data import ensure_default_admin

# --- Configuration du logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    if not value.startswith("http"):
        value = f"https://{value}"
    return value.rstrip("/")


def _build_cors_origins() -> list[str]:
    origins = sorted({o for o in (_sanitize_origin(origin) for origin in settings.BACKEND_CORS_ORIGINS) if o})
    logger.info("CORS origins configurés: %s", origins)
    return origins


# --- Initialisation de l'application FastAPI ---
app = FastAPI(
    title="LogiTrack API",
    openapi_url="/api/v1/openapi.json",
)

# --- Configuration des Middlewares ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(api_router, prefix="/api/v1")


# --- Événement de Démarrage ---
@app.on_event("startup")
async def startup():
    logger.info("Vérification et création des tables de la base de données...")
    async with db_session.async_engine.begin() as conn:
        await conn.run_sync(db_base.Base.metadata.create_all)
    logger.info("Les tables de la base de données sont prêtes.")

    with db_session.SessionLocal() as session:
        ensure_default_admin(session, settings)


# --- Route Racine ---
@app.get("/")
def read_root():
    return {"message": "Welcome to LogiTrack API!"}
