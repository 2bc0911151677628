"""
Session store registry
======================

Chaque partie est une instance `GameSession` identifiée par un `session_id`.
Les instances sont mises en cache en mémoire ; si `PERSIST_SESSIONS` est actif,
un snapshot complet est écrit dans `DATA_DIR/sessions/<session_id>/game.json`
après chaque mutation et relu lors d'un défaut de cache.

Concurrence:
- `_LOCK` protège le registre.
- Chaque session porte son propre verrou : les handlers FastAPI synchrones
  tournent dans un threadpool, deux coups sur une même partie sont sérialisés.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, Optional, TypeVar
from uuid import uuid4

from pairs_app.config.settings import settings
from .errors import GameError, InternalError, InvalidArgument, SessionExists, SessionNotFound
from .game_engine import GameSession
from .io_utils import read_json, remove_tree, write_json

logger = logging.getLogger(__name__)

GAME_FILENAME = "game.json"
# un id sert aussi de nom de dossier : pas de séparateur ni de "."
SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

_SESSIONS: Dict[str, GameSession] = {}
_LOCK = RLock()

T = TypeVar("T")


# -----------------------------
# Chemins / persistance
# -----------------------------
def sessions_dir() -> Path:
    return Path(settings.DATA_DIR) / "sessions"


def _session_dir(session_id: str) -> Path:
    """Dossier de la session ; refuse tout chemin qui sortirait de `sessions_dir()`."""
    root = sessions_dir().resolve()
    path = (root / _validate(session_id)).resolve()
    if path.parent != root:
        raise InvalidArgument(f"invalid session id '{session_id}'")
    return path


def _game_path(session_id: str) -> Path:
    return _session_dir(session_id) / GAME_FILENAME


def save_session(session: GameSession) -> None:
    """Persiste le snapshot complet (no-op si PERSIST_SESSIONS est désactivé)."""
    if not settings.PERSIST_SESSIONS:
        return
    try:
        write_json(_game_path(session.session_id), session.to_dict())
    except OSError:
        logger.exception("could not persist session %s", session.session_id)


def _load_session(session_id: str) -> Optional[GameSession]:
    if not settings.PERSIST_SESSIONS:
        return None
    path = _game_path(session_id)
    try:
        data = read_json(path)
    except (OSError, ValueError):
        logger.exception("could not read session snapshot %s", path)
        return None
    if not isinstance(data, dict):
        return None
    return GameSession.from_dict(data)


def _validate(session_id: Optional[str]) -> str:
    """Lève InvalidArgument si l'id n'est pas de la forme `[A-Za-z0-9_-]{1,64}`."""
    if not isinstance(session_id, str) or not SESSION_ID_RE.match(session_id):
        raise InvalidArgument(f"invalid session id {session_id!r}")
    return session_id


def _exists(sid: str) -> bool:
    if sid in _SESSIONS:
        return True
    return settings.PERSIST_SESSIONS and _game_path(sid).exists()


# -----------------------------
# Registre
# -----------------------------
def create_session(session_id: str | None = None, max_pairs: int | None = None) -> GameSession:
    """
    Crée une session Idle.
    Lève InvalidArgument si l'id imposé est mal formé, SessionExists s'il est déjà pris.
    """
    sid = _validate(session_id) if session_id is not None else uuid4().hex
    session = GameSession(session_id=sid)
    if max_pairs is not None:
        session.max_pairs = max_pairs
    with _LOCK:
        if _exists(sid):
            raise SessionExists(f"session '{sid}' already exists")
        _SESSIONS[sid] = session
    save_session(session)
    logger.debug("session created %s", sid)
    return session


def get_session(session_id: str) -> GameSession:
    """
    Retourne la session `session_id` (cache puis disque).
    Lève SessionNotFound si elle n'existe nulle part, InvalidArgument si l'id est mal formé.
    """
    sid = _validate(session_id)
    with _LOCK:
        session = _SESSIONS.get(sid)
        if session is None:
            session = _load_session(sid)
            if session is not None:
                _SESSIONS[sid] = session
    if session is None:
        raise SessionNotFound(f"session '{sid}' not found")
    return session


def drop_session(session_id: str) -> bool:
    """Retire une session du cache et supprime son snapshot disque éventuel."""
    sid = _validate(session_id)
    with _LOCK:
        existed = _SESSIONS.pop(sid, None) is not None
    if settings.PERSIST_SESSIONS:
        path = _session_dir(sid)
        existed = existed or path.exists()
        remove_tree(path)
    return existed


def list_session_ids() -> list[str]:
    """Retourne la liste des sessions actuellement chargées en mémoire."""
    with _LOCK:
        return list(_SESSIONS.keys())


def clear_sessions() -> None:
    """Vide le cache mémoire (les snapshots disque sont conservés)."""
    with _LOCK:
        _SESSIONS.clear()


def run_on_session(session_id: str, action: Callable[[GameSession], T], mutate: bool = True) -> T:
    """
    Exécute `action(session)` sous le verrou de la session.

    - Les GameError remontent telles quelles (aucune mutation n'a eu lieu).
    - Toute autre exception est journalisée puis encapsulée en InternalError.
    - Après une action mutante réussie, la session est persistée.
    """
    session = get_session(session_id)
    with session.lock:
        try:
            result = action(session)
        except GameError:
            raise
        except Exception as exc:
            logger.exception("unexpected error on session %s", session.session_id)
            raise InternalError("unexpected engine failure") from exc
        if mutate:
            save_session(session)
        return result
