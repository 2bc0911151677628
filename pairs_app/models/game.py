"""
Models / game.py
Rôle:
- Schémas Pydantic des requêtes/réponses de l'API de jeu.
- Le snapshot reflète `GameSession.state()` : les symboles des tuiles cachées
  valent `None`.

Champs notables:
- status: "IDLE" | "IN_PROGRESS" | "FINISHED".
- mode: "pairs" (classique) | "sequence" (ordre imposé, erreur éliminatoire).
- pending_revealed: ids des tuiles retournées du tour en cours (0 ou 1 entre deux coups).
- end_reason: "completed" | "stopped" | "error" une fois la partie terminée.
"""
from pydantic import BaseModel, Field, StrictInt
from typing import List, Literal, Optional

from pairs_app.models.player import PlayerView, RankedResult

GameMode = Literal["pairs", "sequence"]


class TileView(BaseModel):
    """Tuile telle que vue par le client (symbole masqué si cachée)."""
    id: int
    symbol: Optional[str] = None
    revealed: bool = False
    matched: bool = False


class RevealedTile(BaseModel):
    id: int
    symbol: str


class GameSnapshot(BaseModel):
    """Etat public d'une session."""
    session_id: str
    mode: GameMode = "pairs"
    status: Literal["IDLE", "IN_PROGRESS", "FINISHED"]
    max_pairs: int
    pairs_found: int = 0
    current_player_index: int = 0
    current_player_id: Optional[int] = None
    pending_revealed: List[int] = Field(default_factory=list)
    board: List[TileView] = Field(default_factory=list)
    players: List[PlayerView] = Field(default_factory=list)
    sequence: List[str] = Field(default_factory=list)  # ordre cible (mode séquence)
    next_symbol: Optional[str] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    end_reason: Optional[str] = None


class SessionCreatePayload(BaseModel):
    session_id: Optional[str] = Field(None, description="Identifiant imposé (sinon auto)")
    max_pairs: Optional[int] = Field(None, ge=1, description="Nombre de paires (défaut: BOARD_PAIRS)")


class SessionCreateResponse(BaseModel):
    session_id: str
    status: str
    max_pairs: int


class StartPayload(BaseModel):
    # bornes métier vérifiées par le moteur (InvalidArgument → 400)
    player_count: StrictInt = Field(..., description="Nombre de joueurs (1 à 4)")
    names: Optional[List[str]] = Field(None, description="Noms affichés (défaut: 'Jogador N')")
    mode: str = Field("pairs", description="pairs | sequence")


class StartNewPayload(StartPayload):
    max_pairs: Optional[int] = Field(None, ge=1, description="Nombre de paires (défaut: BOARD_PAIRS)")


class MovePayload(BaseModel):
    player_id: StrictInt = Field(..., description="Joueur dont c'est le tour (1-based)")
    tile_id: StrictInt = Field(..., description="Position de la tuile sur le plateau")


class MoveResponse(BaseModel):
    matched: Optional[bool] = None  # None = en attente de la deuxième carte
    session_finished: bool = False
    revealed: List[RevealedTile] = Field(default_factory=list)
    snapshot: GameSnapshot


class FinishResponse(BaseModel):
    session_id: str
    end_reason: Optional[str] = None
    ranked_results: List[RankedResult] = Field(default_factory=list)
    winners: List[int] = Field(default_factory=list)


class SymbolsResponse(BaseModel):
    symbols: List[str]
    board_pairs: int
    max_players: int
