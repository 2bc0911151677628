"""
Service: errors.py
Rôle:
- Taxonomie des erreurs du moteur de jeu.
- Chaque erreur porte un `code` stable (renvoyé au client) et un `status_code`
  HTTP utilisé par les routes pour la traduction en `HTTPException`.
"""


class GameError(RuntimeError):
    """Erreur de base du moteur (jamais fatale au process)."""

    code = "game_error"
    status_code = 400


class InvalidArgument(GameError):
    """Nombre de joueurs hors bornes, identifiants mal formés, mode inconnu."""

    code = "invalid_argument"
    status_code = 400


class NotInProgress(GameError):
    """Action sur une session Idle ou Finished."""

    code = "not_in_progress"
    status_code = 409


class NotYourTurn(GameError):
    code = "not_your_turn"
    status_code = 409


class InvalidTile(GameError):
    """Tuile introuvable, déjà retournée ou déjà trouvée."""

    code = "invalid_tile"
    status_code = 400


class InternalError(GameError):
    code = "internal_error"
    status_code = 500


class SessionNotFound(GameError):
    code = "session_not_found"
    status_code = 404


class SessionExists(GameError):
    """Identifiant déjà attribué à une autre partie."""

    code = "session_exists"
    status_code = 409
