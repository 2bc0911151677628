"""
Utils: board_utils.py
Rôle:
- Générer le plateau d'une partie : tirage des symboles puis mélange des paires.

Comportement:
- `max_pairs` symboles distincts sont tirés uniformément sans remise (`rng.sample`).
- Chaque symbole est dupliqué, puis la liste est mélangée par Fisher–Yates.
- `seed` / `rng` permettent de rejouer le tirage (déterministe pour tests).

Notes d'implémentation:
- Le tri par comparateur aléatoire (`sort(() => 0.5 - Math.random())`) n'est pas
  uniforme : on fait le mélange à la main, un échange par position.
- Les ids de tuiles suivent la position sur le plateau (0..n-1).
"""
import random
from typing import List, Optional, Sequence

from pairs_app.services.errors import InvalidArgument

# Jeu de symboles du jeu d'origine (animaux)
DEFAULT_SYMBOLS: List[str] = [
    "🦁", "🐘", "🦒", "🐵", "🐬", "🐼", "🐸", "🐯", "🐙",
    "🦄", "🦋", "🦕", "🐞", "🐠", "🦩", "🐿️", "🦔", "🦜",
]


def fisher_yates(items: list, rng: Optional[random.Random] = None) -> list:
    """
    Mélange `items` en place (Fisher–Yates, parcours descendant) et le retourne.

    Chaque permutation est équiprobable si `rng.randint` est uniforme.
    """
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def build_deck(
    symbols: Sequence[str],
    max_pairs: int,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """
    Construit la suite ordonnée des symboles du plateau (`2 * max_pairs` entrées).

    Args:
        symbols: jeu complet de symboles disponibles (doublons ignorés).
        max_pairs: nombre de paires voulu.
        seed: graine RNG pour un tirage reproductible (ignorée si `rng` fourni).
        rng: générateur explicite (prioritaire sur `seed`).

    Raises:
        InvalidArgument: moins de `max_pairs` symboles distincts, ou `max_pairs < 1`.
    """
    if max_pairs < 1:
        raise InvalidArgument("max_pairs must be >= 1")

    # dict.fromkeys garde l'ordre d'origine, donc le tirage reste reproductible
    pool = list(dict.fromkeys(symbols))
    if len(pool) < max_pairs:
        raise InvalidArgument(
            f"symbol set has {len(pool)} distinct symbols, {max_pairs} pairs requested"
        )

    if rng is None:
        rng = random.Random(seed) if seed is not None else random.Random()

    selected = rng.sample(pool, max_pairs)
    deck = selected + selected
    return fisher_yates(deck, rng)
