"""
Service: game_engine.py
Rôle:
- Porter les règles du jeu de paires (mémoire) : démarrage, coups, fin de partie.
- Valider chaque coup avant toute mutation (un coup refusé ne modifie rien).
- Produire des snapshots JSON où les symboles des tuiles cachées sont masqués.

Cycle de vie:
    IDLE → IN_PROGRESS → FINISHED (terminal jusqu'au prochain `start`)

Modes:
- "pairs"    : paires classiques, le tour passe au joueur suivant sur une erreur.
- "sequence" : les paires doivent être trouvées dans l'ordre de `sequence` ;
               la première erreur termine la partie (end_reason="error").
               Mode solo : le tour ne tourne jamais.

API interne exposée aux routes (via session_store):
- session.start(player_count, names, mode)
- session.move(player_id, tile_id)
- session.finish()
- session.state()
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from pairs_app.config.settings import settings
from pairs_app.utils.board_utils import DEFAULT_SYMBOLS, build_deck, fisher_yates
from . import scoring
from .errors import InvalidArgument, InvalidTile, NotInProgress, NotYourTurn

logger = logging.getLogger(__name__)

STATUS_IDLE = "IDLE"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_FINISHED = "FINISHED"

MODE_PAIRS = "pairs"
MODE_SEQUENCE = "sequence"
MODES = (MODE_PAIRS, MODE_SEQUENCE)

END_COMPLETED = "completed"   # toutes les paires trouvées
END_STOPPED = "stopped"       # fin anticipée demandée par le client
END_ERROR = "error"           # mauvaise carte en mode séquence

MIN_PLAYERS = 1


def _require_int(value: Any, label: str) -> int:
    # bool est un int en Python : on le refuse explicitement
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{label} must be an integer")
    return value


def _player_name(names: List[str], index: int) -> str:
    """Nom fourni par le client, sinon le libellé par défaut "Jogador N"."""
    if index < len(names):
        name = (names[index] or "").strip()
        if name:
            return name
    return f"Jogador {index + 1}"


@dataclass
class Tile:
    id: int
    symbol: str
    revealed: bool = False
    matched: bool = False

    def view(self) -> Dict[str, Any]:
        """Vue publique : le symbole n'est exposé que si la tuile est visible."""
        visible = self.revealed or self.matched
        return {
            "id": self.id,
            "symbol": self.symbol if visible else None,
            "revealed": self.revealed,
            "matched": self.matched,
        }


@dataclass
class Player:
    id: int
    name: str
    score: int = 0
    pairs_found: int = 0
    total_attempts: int = 0
    correct_attempts: int = 0
    errors: int = 0
    response_times: List[float] = field(default_factory=list)

    def view(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "pairs_found": self.pairs_found,
            "total_attempts": self.total_attempts,
            "correct_attempts": self.correct_attempts,
            "errors": self.errors,
            "elapsed_seconds": round(sum(self.response_times), 3),
        }


@dataclass
class GameSession:
    session_id: str
    mode: str = MODE_PAIRS
    status: str = STATUS_IDLE
    board: List[Tile] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0
    pending_revealed: List[int] = field(default_factory=list)
    pairs_found: int = 0
    max_pairs: int = field(default_factory=lambda: settings.BOARD_PAIRS)
    symbols: List[str] = field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    sequence: List[str] = field(default_factory=list)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    end_reason: Optional[str] = None
    clock: Callable[[], float] = field(default=time.time, repr=False)
    rng: Optional[random.Random] = field(default=None, repr=False)
    _pick_started_at: Optional[float] = field(default=None, init=False, repr=False)
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)

    # -----------------------------
    # Accès
    # -----------------------------
    @property
    def lock(self) -> RLock:
        return self._lock

    @property
    def current_player(self) -> Optional[Player]:
        if self.status != STATUS_IN_PROGRESS or not self.players:
            return None
        return self.players[self.current_player_index]

    def _tile(self, tile_id: int) -> Tile:
        if 0 <= tile_id < len(self.board):
            return self.board[tile_id]
        raise InvalidTile(f"tile {tile_id} not found")

    def _player(self, player_id: int) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise NotYourTurn(f"player {player_id} is not in this game")

    # -----------------------------
    # Actions
    # -----------------------------
    def start(
        self,
        player_count: int,
        names: Optional[List[str]] = None,
        mode: str = MODE_PAIRS,
    ) -> Dict[str, Any]:
        """
        (Re)lance une partie : plateau neuf, joueurs remis à zéro.
        Lève InvalidArgument si player_count hors [1, MAX_PLAYERS], mode inconnu
        ou plus d'un joueur en mode "sequence".
        """
        player_count = _require_int(player_count, "player_count")
        if not MIN_PLAYERS <= player_count <= settings.MAX_PLAYERS:
            raise InvalidArgument(
                f"player_count must be between {MIN_PLAYERS} and {settings.MAX_PLAYERS}"
            )
        if mode not in MODES:
            raise InvalidArgument(f"unknown mode '{mode}'")
        if mode == MODE_SEQUENCE and player_count > 1:
            raise InvalidArgument("sequence mode is single-player")
        names = list(names or [])
        if len(names) > player_count:
            raise InvalidArgument("more names than players")

        with self._lock:
            deck = build_deck(self.symbols, self.max_pairs, rng=self.rng)
            self.board = [Tile(id=i, symbol=s) for i, s in enumerate(deck)]
            self.players = [
                Player(id=i + 1, name=_player_name(names, i)) for i in range(player_count)
            ]
            self.mode = mode
            self.sequence = []
            if mode == MODE_SEQUENCE:
                # ordre cible public : chaque symbole du plateau une fois
                self.sequence = fisher_yates(list(dict.fromkeys(deck)), self.rng)
            self.current_player_index = 0
            self.pending_revealed = []
            self.pairs_found = 0
            self.started_at = self.clock()
            self.finished_at = None
            self.end_reason = None
            self._pick_started_at = None
            self.status = STATUS_IN_PROGRESS
            logger.info(
                "game started session=%s players=%d mode=%s pairs=%d",
                self.session_id, player_count, mode, self.max_pairs,
            )
            return self.state()

    def move(self, player_id: int, tile_id: int) -> Dict[str, Any]:
        """
        Retourne une tuile pour le joueur `player_id`.

        Résultat:
            matched: None (première carte), True (paire), False (erreur)
            session_finished: True si le coup termine la partie
            revealed: tuiles retournées par ce coup, symboles compris
            snapshot: état public après le coup
        """
        with self._lock:
            if self.status != STATUS_IN_PROGRESS:
                raise NotInProgress("game is not in progress")
            player_id = _require_int(player_id, "player_id")
            tile_id = _require_int(tile_id, "tile_id")

            tile = self._tile(tile_id)
            if tile.matched:
                raise InvalidTile(f"tile {tile_id} already matched")
            if tile.revealed:
                raise InvalidTile(f"tile {tile_id} already revealed")

            player = self._player(player_id)
            if player is not self.current_player:
                logger.debug("rejected move session=%s player=%d: not your turn", self.session_id, player_id)
                raise NotYourTurn(f"it is player {self.current_player.id}'s turn")

            tile.revealed = True
            self.pending_revealed.append(tile.id)
            player.total_attempts += 1

            if len(self.pending_revealed) == 1:
                if self.mode == MODE_SEQUENCE and tile.symbol != self.next_symbol:
                    return self._end_on_error(player, [tile])
                self._pick_started_at = self.clock()
                return self._move_result(None, [tile])

            first, second = (self.board[i] for i in self.pending_revealed)
            if first.symbol == second.symbol:
                return self._resolve_match(player, first, second)
            if self.mode == MODE_SEQUENCE:
                return self._end_on_error(player, [first, second])
            return self._resolve_mismatch(player, first, second)

    def finish(self) -> Dict[str, Any]:
        """
        Termine la partie (anticipée si encore en cours) et renvoie le classement.
        Idempotent sur une partie déjà terminée.
        """
        with self._lock:
            if self.status == STATUS_IDLE:
                raise NotInProgress("game was never started")
            if self.status == STATUS_IN_PROGRESS:
                self._hide_pending()
                self._close(END_STOPPED)
            results = scoring.ranked_results(self.players)
            return {
                "session_id": self.session_id,
                "end_reason": self.end_reason,
                "ranked_results": results,
                "winners": scoring.winners(results),
            }

    def state(self) -> Dict[str, Any]:
        """Snapshot public (lecture seule, stable tant qu'aucun coup n'est joué)."""
        with self._lock:
            current = self.current_player
            return {
                "session_id": self.session_id,
                "mode": self.mode,
                "status": self.status,
                "max_pairs": self.max_pairs,
                "pairs_found": self.pairs_found,
                "current_player_index": self.current_player_index,
                "current_player_id": current.id if current else None,
                "pending_revealed": list(self.pending_revealed),
                "board": [t.view() for t in self.board],
                "players": [p.view() for p in self.players],
                "sequence": list(self.sequence),
                "next_symbol": self.next_symbol,
                "started_at": self.started_at,
                "finished_at": self.finished_at,
                "end_reason": self.end_reason,
            }

    @property
    def next_symbol(self) -> Optional[str]:
        if self.mode != MODE_SEQUENCE or self.status != STATUS_IN_PROGRESS:
            return None
        if self.pairs_found >= len(self.sequence):
            return None
        return self.sequence[self.pairs_found]

    # -----------------------------
    # Résolution interne
    # -----------------------------
    def _resolve_match(self, player: Player, first: Tile, second: Tile) -> Dict[str, Any]:
        first.matched = second.matched = True
        player.score += settings.POINTS_PER_PAIR
        player.pairs_found += 1
        player.correct_attempts += 1
        if self._pick_started_at is not None:
            player.response_times.append(max(0.0, self.clock() - self._pick_started_at))
        self._pick_started_at = None
        self.pending_revealed = []
        self.pairs_found += 1
        if self.pairs_found == self.max_pairs:
            self._close(END_COMPLETED)
        return self._move_result(True, [first, second])

    def _resolve_mismatch(self, player: Player, first: Tile, second: Tile) -> Dict[str, Any]:
        revealed = [{"id": t.id, "symbol": t.symbol} for t in (first, second)]
        first.revealed = second.revealed = False
        player.errors += 1
        self._pick_started_at = None
        self.pending_revealed = []
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        return self._move_result(False, revealed)

    def _end_on_error(self, player: Player, tiles: List[Tile]) -> Dict[str, Any]:
        revealed = [{"id": t.id, "symbol": t.symbol} for t in tiles]
        player.errors += 1
        self._hide_pending()
        self._close(END_ERROR)
        return self._move_result(False, revealed)

    def _hide_pending(self) -> None:
        for tile_id in self.pending_revealed:
            tile = self.board[tile_id]
            if not tile.matched:
                tile.revealed = False
        self.pending_revealed = []
        self._pick_started_at = None

    def _close(self, reason: str) -> None:
        self.status = STATUS_FINISHED
        self.finished_at = self.clock()
        self.end_reason = reason
        logger.info(
            "game finished session=%s reason=%s pairs=%d/%d",
            self.session_id, reason, self.pairs_found, self.max_pairs,
        )

    def _move_result(self, matched: Optional[bool], revealed: List[Any]) -> Dict[str, Any]:
        revealed_view = [
            {"id": t.id, "symbol": t.symbol} if isinstance(t, Tile) else t for t in revealed
        ]
        return {
            "matched": matched,
            "session_finished": self.status == STATUS_FINISHED,
            "revealed": revealed_view,
            "snapshot": self.state(),
        }

    # -----------------------------
    # Persistance (snapshot complet, non masqué)
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "session_id": self.session_id,
                "mode": self.mode,
                "status": self.status,
                "board": [vars(t).copy() for t in self.board],
                "players": [
                    {**vars(p), "response_times": list(p.response_times)} for p in self.players
                ],
                "current_player_index": self.current_player_index,
                "pending_revealed": list(self.pending_revealed),
                "pairs_found": self.pairs_found,
                "max_pairs": self.max_pairs,
                "symbols": list(self.symbols),
                "sequence": list(self.sequence),
                "started_at": self.started_at,
                "finished_at": self.finished_at,
                "end_reason": self.end_reason,
                "pick_started_at": self._pick_started_at,
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSession":
        session = cls(
            session_id=data["session_id"],
            mode=data.get("mode", MODE_PAIRS),
            status=data.get("status", STATUS_IDLE),
            board=[Tile(**t) for t in data.get("board", [])],
            players=[Player(**p) for p in data.get("players", [])],
            current_player_index=data.get("current_player_index", 0),
            pending_revealed=list(data.get("pending_revealed", [])),
            pairs_found=data.get("pairs_found", 0),
            max_pairs=data.get("max_pairs", settings.BOARD_PAIRS),
            symbols=list(data.get("symbols") or DEFAULT_SYMBOLS),
            sequence=list(data.get("sequence", [])),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
            end_reason=data.get("end_reason"),
        )
        session._pick_started_at = data.get("pick_started_at")
        return session
