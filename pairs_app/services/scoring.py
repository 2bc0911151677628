"""
Service: scoring.py
Rôle:
- Calculer l'indice de performance d'un joueur ("QI Lúdico").
- Classer les joueurs en fin de partie.

Formule canonique:
    pair_turns = total_attempts // 2
    errors     = max(0, pair_turns - correct_attempts)
    efficiency = correct_attempts / pair_turns          (0 si pair_turns == 0)
    accuracy   = 2 * correct_attempts + 40 * efficiency
    penalty    = 0.5 * elapsed / correct_attempts + 3 * errors
                 (terme temps nul si correct_attempts == 0 ou elapsed == 0)
    index      = clamp(round(80 + accuracy - penalty), 50, 150)

`elapsed` est la somme des temps de réponse (secondes) entre les deux
cartes d'une paire trouvée.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Sequence

if TYPE_CHECKING:
    from .game_engine import Player

BASE_INDEX = 80
CORRECT_WEIGHT = 2
EFFICIENCY_WEIGHT = 40
TIME_WEIGHT = 0.5
ERROR_WEIGHT = 3
INDEX_MIN = 50
INDEX_MAX = 150


def accuracy_bonus(correct_attempts: int, pair_turns: int) -> float:
    if correct_attempts <= 0 or pair_turns <= 0:
        return 0.0
    efficiency = correct_attempts / pair_turns
    return CORRECT_WEIGHT * correct_attempts + EFFICIENCY_WEIGHT * efficiency


def time_penalty(elapsed_seconds: float, correct_attempts: int, error_count: int) -> float:
    """Pénalité linéaire : temps moyen par paire trouvée + coût fixe par erreur."""
    penalty = ERROR_WEIGHT * max(0, error_count)
    if elapsed_seconds > 0 and correct_attempts > 0:
        penalty += TIME_WEIGHT * elapsed_seconds / correct_attempts
    return penalty


def performance_index(
    correct_attempts: int,
    total_attempts: int,
    elapsed_seconds: float = 0.0,
    error_count: int | None = None,
) -> int:
    """
    Indice borné dans [INDEX_MIN, INDEX_MAX].

    `total_attempts` compte les cartes retournées (deux par tentative de paire).
    Si `error_count` est absent, il est déduit des tentatives ratées.
    """
    pair_turns = max(0, total_attempts) // 2
    if error_count is None:
        error_count = max(0, pair_turns - correct_attempts)
    raw = (
        BASE_INDEX
        + accuracy_bonus(correct_attempts, pair_turns)
        - time_penalty(elapsed_seconds, correct_attempts, error_count)
    )
    return int(min(INDEX_MAX, max(INDEX_MIN, round(raw))))


def player_index(player: "Player") -> int:
    return performance_index(
        player.correct_attempts,
        player.total_attempts,
        sum(player.response_times),
        player.errors,
    )


def rank_players(players: Iterable["Player"]) -> List["Player"]:
    """Tri décroissant par score, puis pairs_found; id croissant à égalité."""
    return sorted(players, key=lambda p: (-p.score, -p.pairs_found, p.id))


def ranked_results(players: Sequence["Player"]) -> List[Dict[str, Any]]:
    """Vue de classement (rang partagé en cas d'égalité parfaite)."""
    results: List[Dict[str, Any]] = []
    previous_key = None
    rank = 0
    for position, player in enumerate(rank_players(players), start=1):
        key = (player.score, player.pairs_found)
        if key != previous_key:
            rank = position
            previous_key = key
        results.append(
            {
                "rank": rank,
                "player_id": player.id,
                "name": player.name,
                "score": player.score,
                "pairs_found": player.pairs_found,
                "total_attempts": player.total_attempts,
                "correct_attempts": player.correct_attempts,
                "elapsed_seconds": round(sum(player.response_times), 3),
                "performance_index": player_index(player),
            }
        )
    return results


def winners(results: List[Dict[str, Any]]) -> List[int]:
    """Ids des joueurs classés premiers (plusieurs en cas d'égalité)."""
    return [r["player_id"] for r in results if r["rank"] == 1]
