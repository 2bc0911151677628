"""
Module routes/game.py
Rôle:
- API JSON du jeu de paires : création de session, démarrage, coups, fin, état.

Intégrations:
- session_store: registre des `GameSession` (une par partie, verrou par session).
- origin_required: contrôle d'origine posé sur le router (OPTIONS géré par CORS).

Erreurs:
- Les GameError du moteur sont traduites en HTTPException avec
  `detail = {"error": <code>, "message": <texte>}` (400 / 404 / 409 / 500).
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import Any, Callable, Dict, Optional

from pairs_app.config.settings import settings
from pairs_app.deps.origin import origin_required
from pairs_app.models.game import (
    FinishResponse,
    GameSnapshot,
    MovePayload,
    MoveResponse,
    SessionCreatePayload,
    SessionCreateResponse,
    StartNewPayload,
    StartPayload,
    SymbolsResponse,
)
from pairs_app.services.errors import GameError
from pairs_app.services.game_engine import GameSession
from pairs_app.services.session_store import (
    create_session,
    drop_session,
    run_on_session,
)
from pairs_app.utils.board_utils import DEFAULT_SYMBOLS

router = APIRouter(prefix="/api/game", tags=["game"], dependencies=[Depends(origin_required)])


def _http_error(exc: GameError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail={"error": exc.code, "message": str(exc)})


def _run(session_id: str, action: Callable[[GameSession], Dict[str, Any]], mutate: bool = True) -> Dict[str, Any]:
    try:
        return run_on_session(session_id, action, mutate=mutate)
    except GameError as exc:
        raise _http_error(exc) from exc


@router.get("/symbols", response_model=SymbolsResponse)
def symbols():
    """Jeu de symboles par défaut et taille de plateau configurée."""
    return {
        "symbols": DEFAULT_SYMBOLS,
        "board_pairs": settings.BOARD_PAIRS,
        "max_players": settings.MAX_PLAYERS,
    }


@router.post("/sessions", response_model=SessionCreateResponse)
def create(payload: Optional[SessionCreatePayload] = None):
    """Crée une session Idle ; `start` la lancera."""
    payload = payload or SessionCreatePayload()
    try:
        session = create_session(payload.session_id, max_pairs=payload.max_pairs)
    except GameError as exc:
        raise _http_error(exc) from exc
    return {"session_id": session.session_id, "status": session.status, "max_pairs": session.max_pairs}


@router.post("/start", response_model=GameSnapshot)
def create_and_start(payload: StartNewPayload):
    """Raccourci : nouvelle session + démarrage immédiat."""
    session = create_session(max_pairs=payload.max_pairs)
    try:
        return _run(session.session_id, lambda s: s.start(payload.player_count, payload.names, payload.mode))
    except HTTPException:
        # la session n'a jamais démarré : inutile de la garder
        drop_session(session.session_id)
        raise


@router.post("/sessions/{session_id}/start", response_model=GameSnapshot)
def start(session_id: str, payload: StartPayload):
    """(Re)démarre la partie : plateau neuf, scores remis à zéro."""
    return _run(session_id, lambda s: s.start(payload.player_count, payload.names, payload.mode))


@router.post("/sessions/{session_id}/move", response_model=MoveResponse)
def move(session_id: str, payload: MovePayload):
    """
    Retourne une tuile pour le joueur courant.
    - matched=None : première carte, en attente de la seconde
    - matched=True : paire trouvée, le joueur rejoue
    - matched=False : erreur, `revealed` donne les symboles à afficher avant de recacher
    """
    return _run(session_id, lambda s: s.move(payload.player_id, payload.tile_id))


@router.post("/sessions/{session_id}/finish", response_model=FinishResponse)
def finish(session_id: str):
    """Termine la partie (anticipée si besoin) et renvoie le classement."""
    return _run(session_id, lambda s: s.finish())


@router.get("/sessions/{session_id}/state", response_model=GameSnapshot)
def state(session_id: str):
    return _run(session_id, lambda s: s.state(), mutate=False)


@router.delete("/sessions/{session_id}")
def delete(session_id: str):
    try:
        existed = drop_session(session_id)
    except GameError as exc:
        raise _http_error(exc) from exc
    if not existed:
        raise HTTPException(status_code=404, detail={"error": "session_not_found", "message": session_id})
    return {"ok": True, "session_id": session_id}
