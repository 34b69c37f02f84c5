"""Point d'entrée Vercel de l'API LogiTrack."""

import sys
from pathlib import Path

# Vercel exécute ce fichier depuis ``api/`` : la racine du dépôt doit être importable.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from logitrack import main  # noqa: E402

# Vercel sert la variable ``app`` du module.
app = main.app
