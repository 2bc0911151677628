"""
Models / player.py
Rôle:
- Vues Pydantic d'un joueur : en cours de partie et dans le classement final.

Champs:
- id: identifiant 1-based (ordre de jeu).
- name: nom affiché ("Jogador N" par défaut).
- total_attempts: cartes retournées ; correct_attempts: paires trouvées.
- performance_index: "QI Lúdico", borné dans [50, 150].
"""
from pydantic import BaseModel


class PlayerView(BaseModel):
    """Profil joueur exposé dans les snapshots."""
    id: int
    name: str
    score: int = 0
    pairs_found: int = 0
    total_attempts: int = 0
    correct_attempts: int = 0
    errors: int = 0
    elapsed_seconds: float = 0.0  # somme des temps de réponse des paires trouvées


class RankedResult(BaseModel):
    rank: int  # partagé en cas d'égalité (score, pairs_found)
    player_id: int
    name: str
    score: int
    pairs_found: int
    total_attempts: int
    correct_attempts: int
    elapsed_seconds: float
    performance_index: int
