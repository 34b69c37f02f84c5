# Fichier: logitrack/api/v1/api.py
from fastapi import APIRouter
from .endpoints import (
    auth_router,
    access_router,
    notification_router,
    search_router,
)

api_router = APIRouter()

api_router.include_router(auth_router.router, prefix="/auth", tags=["Auth"])
api_router.include_router(access_router.router, prefix="/access", tags=["Access"])
api_router.include_router(notification_router.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(search_router.router, prefix="/search", tags=["Search"])
