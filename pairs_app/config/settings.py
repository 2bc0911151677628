"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres de l'app (nom, host/port, origines autorisées,
  taille du plateau, persistance…).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from pairs_app.config.settings import settings`.

Bonnes pratiques
----------------
- `ALLOWED_ORIGIN_MARKERS` est une liste JSON dans l'environnement
  (ex: `'["playjogosgratis.com","localhost"]'`).
- `PERSIST_SESSIONS` est désactivé par défaut : aucune garantie de durabilité
  entre deux redémarrages.
- `DATA_DIR` calcule un chemin relatif au repo : `<repo>/pairs_app/data`.

Exemples de `.env`
------------------
APP_NAME="Encontre os Pares (Staging)"
PORT=8080
LOG_LEVEL="DEBUG"
ALLOWED_ORIGIN_MARKERS='["playjogosgratis.com","vercel.app","localhost"]'
BOARD_PAIRS=10
PERSIST_SESSIONS=true
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Encontre os Pares Backend"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Une requête passe si son Origin (ou Referer) contient un de ces marqueurs
    ALLOWED_ORIGIN_MARKERS: List[str] = ["playjogosgratis.com", "vercel.app"]
    # En-tête Cache-Control du bundle client
    CLIENT_CACHE_CONTROL: str = "s-maxage=3600, stale-while-revalidate"

    # Règles du jeu
    BOARD_PAIRS: int = 8
    POINTS_PER_PAIR: int = 1
    MAX_PLAYERS: int = 4

    # Répertoire des snapshots de session (si PERSIST_SESSIONS)
    # Par défaut: <repo>/pairs_app/data
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
    PERSIST_SESSIONS: bool = False

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
