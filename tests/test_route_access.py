import pytest

from logitrack.auth.route_access import (
    ACCESS_DENIED_MESSAGE,
    ROUTE_ACCESS,
    AccessDenied,
    GateState,
    RouteGate,
    navigation_for,
    normalize_path,
    required_roles,
)
from logitrack.schemas.toast_schema import ToastType
from logitrack.schemas.user.principal_schema import Principal


def _principal(role: str, user_id: int = 1) -> Principal:
    return Principal(
        id=user_id,
        email=f"{role.lower()}@example.com",
        prenom="Test",
        nom=role,
        role=role,
        statut="Actif",
    )


@pytest.mark.parametrize("role", ["Admin", "Gestionnaire", "Livreur"])
@pytest.mark.parametrize("path", list(ROUTE_ACCESS))
def test_gate_follows_route_table(role, path):
    decision = RouteGate().evaluate(path, _principal(role))

    if role in ROUTE_ACCESS[path]:
        assert decision.state is GateState.ALLOWED
        assert decision.redirect_to is None
        assert decision.toasts == []
    else:
        assert decision.state is GateState.DENIED_REDIRECTING
        assert decision.redirect_to == "/"
        assert len(decision.toasts) == 1


def test_livreur_is_sent_home_from_clients_with_one_warning():
    decision = RouteGate().evaluate("/clients", _principal("Livreur"))

    assert decision.redirect_to == "/"
    assert [(t.message, t.type) for t in decision.toasts] == [(ACCESS_DENIED_MESSAGE, ToastType.WARNING)]


def test_gate_accepts_role_in_any_casing():
    decision = RouteGate().evaluate("/mes-colis", _principal("LIVREUR"))
    assert decision.allowed


def test_unknown_route_is_public():
    decision = RouteGate().evaluate("/aide", None)
    assert decision.state is GateState.ALLOWED


def test_protected_route_without_principal_goes_to_login():
    decision = RouteGate().evaluate("/colis", None)

    assert decision.state is GateState.DENIED_REDIRECTING
    assert decision.redirect_to == "/login"
    assert decision.toasts == []


def test_login_page_is_always_reachable():
    assert RouteGate().evaluate("/login", None).allowed
    assert RouteGate().evaluate("/login", _principal("Admin")).allowed


def test_paths_are_normalized():
    assert normalize_path("/clients/") == "/clients"
    assert normalize_path("/clients?page=2") == "/clients"
    assert normalize_path("clients") == "/clients"
    assert normalize_path("") == "/"
    assert required_roles("/parametres/") == frozenset({"Admin"})


def test_gate_uses_injected_access_check():
    calls = []

    def deny_everything(principal, roles):
        calls.append(frozenset(roles))
        return False

    decision = RouteGate(deny_everything).evaluate("/", _principal("Admin"))

    assert decision.state is GateState.DENIED_REDIRECTING
    assert calls == [ROUTE_ACCESS["/"]]


def test_ensure_raises_access_denied():
    gate = RouteGate()

    gate.ensure("/colis", _principal("Gestionnaire"))
    with pytest.raises(AccessDenied) as exc_info:
        gate.ensure("/db-management", _principal("Gestionnaire"))

    assert exc_info.value.path == "/db-management"
    assert exc_info.value.required == frozenset({"Admin"})


def test_ensure_without_principal_on_protected_route():
    with pytest.raises(AccessDenied):
        RouteGate().ensure("/bons", None)


def test_navigation_for_each_role():
    assert navigation_for(None) == []

    livreur_paths = navigation_for(_principal("Livreur"))
    assert "/mes-colis" in livreur_paths
    assert "/clients" not in livreur_paths

    admin_paths = navigation_for(_principal("Admin"))
    assert "/db-management" in admin_paths
    assert "/mes-colis" not in admin_paths
    assert admin_paths == [path for path in ROUTE_ACCESS if "Admin" in ROUTE_ACCESS[path]]
