"""
Module routes/client.py
Rôle:
- Sert le bundle navigateur du jeu (`pairs_app/static/memory_game.js`).
- Le bundle ne contient que l'affichage ; toutes les règles passent par /api/game.

I/O:
- Lit le fichier statique au premier appel puis le garde en mémoire.

Robustesse:
- 500 si le bundle est absent du paquet.

Front:
- Chargé par la page du jeu via `<script src="/api/client.js">`.
"""
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from pairs_app.config.settings import settings
from pairs_app.deps.origin import origin_required

router = APIRouter(prefix="/api", tags=["client"], dependencies=[Depends(origin_required)])

CLIENT_BUNDLE_PATH = Path(__file__).resolve().parent.parent / "static" / "memory_game.js"
JS_MEDIA_TYPE = "application/javascript; charset=utf-8"


@lru_cache(maxsize=1)
def _load_bundle() -> bytes:
    return CLIENT_BUNDLE_PATH.read_bytes()


@router.get("/client.js")
def client_bundle():
    """Bundle JS du jeu, mis en cache côté CDN (s-maxage)."""
    try:
        content = _load_bundle()
    except OSError:
        raise HTTPException(status_code=500, detail={"error": "internal_error", "message": "client bundle missing"})

    return Response(
        content=content,
        media_type=JS_MEDIA_TYPE,
        headers={"Cache-Control": settings.CLIENT_CACHE_CONTROL},
    )
