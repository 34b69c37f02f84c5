# Fichier: scripts/create_user.py
"""Crée un utilisateur LogiTrack, ou réinitialise son mot de passe s'il existe."""

import argparse
import getpass
import logging
import sys
from pathlib import Path

# --- Configuration du chemin et des imports ---
sys.path.append(str(Path(__file__).resolve().parents[1]))
from logitrack.db.base import Base  # noqa: F401,E402 - charge tous les modèles
from logitrack.db.session import SessionLocal, sync_engine  # noqa: E402
from logitrack.auth.roles import InvalidRoleError, normalize_role  # noqa: E402
from logitrack.crud import utilisateur_crud  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--nom", default="")
    parser.add_argument("--prenom", default="")
    parser.add_argument("--role", default="Livreur", help="Admin, Gestionnaire ou Livreur")
    parser.add_argument("--inactif", action="store_true", help="Créer le compte au statut Inactif")
    args = parser.parse_args(argv)

    try:
        role = normalize_role(args.role)
    except InvalidRoleError as exc:
        parser.error(str(exc))

    password = getpass.getpass("Mot de passe: ")
    if not password:
        parser.error("Mot de passe vide.")

    Base.metadata.create_all(bind=sync_engine)

    with SessionLocal() as db:
        user = utilisateur_crud.get_user_by_email(db, email=args.email)
        if user is not None:
            utilisateur_crud.set_password(db, user, password)
            logger.info("Mot de passe mis à jour pour %s.", args.email)
            return 0

        user = utilisateur_crud.create_user(
            db,
            email=args.email,
            password=password,
            nom=args.nom,
            prenom=args.prenom,
            role=role,
            statut="Inactif" if args.inactif else "Actif",
        )
        logger.info("Utilisateur %s créé (id=%s, rôle=%s).", user.email, user.id, user.role)
    return 0


if __name__ == "__main__":
    sys.exit(main())
