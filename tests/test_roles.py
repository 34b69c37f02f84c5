import pytest

from logitrack.auth.roles import InvalidRoleError, normalize_role, role_in


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("livreur", "Livreur"),
        ("LIVREUR", "Livreur"),
        ("Livreur", "Livreur"),
        ("admin", "Admin"),
        ("gESTIONNAIRE", "Gestionnaire"),
    ],
)
def test_normalize_role_casing(raw, expected):
    assert normalize_role(raw) == expected


def test_non_string_role_falls_back_to_livreur():
    assert normalize_role(None) == "Livreur"
    assert normalize_role(3) == "Livreur"


@pytest.mark.parametrize("raw", ["superadmin", "", "chauffeur", " livreur", "Admin "])
def test_unknown_role_is_rejected(raw):
    with pytest.raises(InvalidRoleError):
        normalize_role(raw)


def test_role_in_ignores_case_and_unknown_values():
    assert role_in("ADMIN", {"Admin"}) is True
    assert role_in("livreur", {"Admin", "Gestionnaire"}) is False
    assert role_in("superadmin", {"Admin"}) is False
