"""
Dépendance de contrôle d'origine
================================

Objectif
--------
Fournir une *dependency* FastAPI `origin_required` qui n'autorise que les
requêtes venant du site du jeu (ou d'un déploiement de preview).

Règle
-----
- L'origine de la requête est le header `Origin`, à défaut le `Referer`.
- Elle est acceptée si elle contient un des marqueurs de
  `settings.ALLOWED_ORIGIN_MARKERS` (ex: `playjogosgratis.com`, `vercel.app`).
- Sinon : 403, `detail = {"error": "origin_not_allowed", "message": "Acesso negado. Origem não autorizada."}`.

Pourquoi pas sur le router entier ?
-----------------------------------
Le navigateur envoie une requête **OPTIONS** sans `Origin` exploitable par nos
routes. Le préflight est servi par le middleware CORS ; seules les méthodes
réelles (GET/POST/DELETE) passent par `origin_required`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from fastapi import HTTPException, Request

from pairs_app.config.settings import settings

logger = logging.getLogger(__name__)

DENIED_MESSAGE = "Acesso negado. Origem não autorizada."


def request_origin(request: Request) -> Optional[str]:
    """Origin si présent, sinon Referer (certains navigateurs omettent Origin en GET)."""
    return request.headers.get("origin") or request.headers.get("referer")


def is_allowed_origin(origin: Optional[str], markers: Iterable[str] | None = None) -> bool:
    if not origin:
        return False
    markers = settings.ALLOWED_ORIGIN_MARKERS if markers is None else markers
    return any(marker and marker in origin for marker in markers)


def origin_required(request: Request) -> str:
    """
    Dépendance d'accès public.

    Retourne l'origine acceptée ; lève 403 si absente ou hors liste.
    """
    origin = request_origin(request)
    if is_allowed_origin(origin):
        return origin
    logger.warning("origin rejected: %r on %s", origin, request.url.path)
    raise HTTPException(status_code=403, detail={"error": "origin_not_allowed", "message": DENIED_MESSAGE})


def cors_origin_regex(markers: Iterable[str] | None = None) -> str:
    """Regex équivalente pour `CORSMiddleware` (préflight OPTIONS des mêmes origines)."""
    markers = settings.ALLOWED_ORIGIN_MARKERS if markers is None else markers
    alternatives = "|".join(re.escape(m) for m in markers if m)
    return f".*({alternatives}).*" if alternatives else r"(?!)"
