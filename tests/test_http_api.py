from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from logitrack.core import security
from logitrack.db.session import get_db
from logitrack.main import app
from logitrack.models.user.notification_model import Notification
from logitrack.notifications import inbox as inbox_module
from tests.utils import DEFAULT_PASSWORD, create_client, create_user


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # Pas de bloc ``with`` : le démarrage (création des tables, admin) n'est pas exécuté.
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


def _auth_headers(user) -> dict[str, str]:
    token = security.create_access_token(subject=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def test_login_sets_session_cookies(db_session, client):
    create_user(db_session, email="admin@example.com", role="ADMIN")

    response = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["role"] == "Admin"
    assert body["toasts"][0]["type"] == "success"
    assert response.cookies.get("access_token") == body["access_token"]


def test_login_failure_returns_401(db_session, client):
    create_user(db_session, email="admin@example.com", role="Admin")

    response = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "faux"})

    assert response.status_code == 401
    assert response.json()["error"] == "Identifiants incorrects ou compte inactif"
    assert response.json()["user"] is None


def test_me_requires_valid_marker(db_session, client):
    user = create_user(db_session, email="gest@example.com")

    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer dummy_token"}).status_code == 401

    response = client.get("/api/v1/auth/me", headers=_auth_headers(user))
    assert response.status_code == 200
    assert response.json()["email"] == "gest@example.com"


def test_inactive_user_is_rejected(db_session, client):
    user = create_user(db_session, email="inactif@example.com", statut="Inactif")

    response = client.get("/api/v1/auth/me", headers=_auth_headers(user))

    assert response.status_code == 403
    assert response.json()["detail"] == "inactive_user"


def test_access_check_for_livreur(db_session, client):
    livreur = create_user(db_session, email="livreur@example.com", role="Livreur")

    response = client.get("/api/v1/access/check", params={"path": "/clients"}, headers=_auth_headers(livreur))

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "denied_redirecting"
    assert body["redirect_to"] == "/"
    assert body["toasts"] == [{"message": "Vous n'avez pas accès à cette page", "type": "warning"}]


def test_access_check_without_session(client):
    body = client.get("/api/v1/access/check", params={"path": "/colis"}).json()
    assert body["redirect_to"] == "/login"


def test_navigation_lists_allowed_routes(db_session, client):
    admin = create_user(db_session, email="admin@example.com", role="Admin")

    paths = client.get("/api/v1/access/navigation", headers=_auth_headers(admin)).json()["paths"]

    assert "/db-management" in paths
    assert "/mes-colis" not in paths


def test_search_requires_authentication(db_session, client):
    user = create_user(db_session, email="livreur@example.com", role="Livreur")
    create_client(db_session, "CL-1", nom="Awa Sarr")

    assert client.get("/api/v1/search", params={"q": "awa"}).status_code == 401

    response = client.get("/api/v1/search", params={"q": "awa"}, headers=_auth_headers(user))
    assert response.status_code == 200
    assert [item["url"] for item in response.json()] == ["/clients/CL-1"]


def test_broadcast_is_forbidden_for_livreur(db_session, client):
    livreur = create_user(db_session, email="livreur@example.com", role="Livreur")

    response = client.post(
        "/api/v1/notifications/broadcast",
        json={"title": "Titre", "message": "Message", "role": "Admin"},
        headers=_auth_headers(livreur),
    )

    assert response.status_code == 403


def test_notification_flow(db_session, client):
    user = create_user(db_session, email="gest@example.com")
    headers = _auth_headers(user)

    created = client.post(
        "/api/v1/notifications/", json={"title": "Colis", "message": "C-1 livré", "type": "success"}, headers=headers
    )
    assert created.status_code == 201
    notification_id = created.json()["notifications"][0]["id"]

    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {"unread_count": 1}

    read = client.post(f"/api/v1/notifications/{notification_id}/read", headers=headers)
    assert read.json()["unread_count"] == 0

    deleted = client.delete(f"/api/v1/notifications/{notification_id}", headers=headers)
    assert deleted.json()["notifications"] == []


def test_create_notification_is_not_saved_when_inbox_is_unavailable(db_session, client, monkeypatch):
    user = create_user(db_session, email="gest@example.com")

    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(inbox_module.notification_crud, "get_notifications_by_user", boom)

    response = client.post(
        "/api/v1/notifications/", json={"title": "Colis", "message": "C-1 livré"}, headers=_auth_headers(user)
    )

    assert response.status_code == 503
    assert db_session.query(Notification).count() == 0


def test_vercel_entry_serves_the_application():
    from api.index import app as vercel_app

    assert vercel_app is app
