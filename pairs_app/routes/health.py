"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + nombre de parties en mémoire).

Notes:
- Pas de contrôle d'origine : utilisé par l'hébergeur / les sondes.
"""
from fastapi import APIRouter

from pairs_app.config.settings import settings
from pairs_app.services.session_store import list_session_ids

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service configuré."""
    return {"ok": True, "service": settings.APP_NAME, "sessions": len(list_session_ids())}
