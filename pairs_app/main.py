"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le logging et le CORS pour le site du jeu,
- Monte les routeurs (API de jeu, bundle client, santé),
- Traduit les erreurs de validation des payloads en `invalid_argument` (400).

Notes
-----
- Les origines autorisées viennent de `settings.ALLOWED_ORIGIN_MARKERS` ; la même
  règle sert au préflight (CORS) et au contrôle `origin_required` des routes.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
- Lancement local : `uvicorn pairs_app.main:app --reload`.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pairs_app.config.settings import settings
from pairs_app.deps.origin import cors_origin_regex
from pairs_app.routes.client import router as client_router
from pairs_app.routes.game import router as game_router
from pairs_app.routes.health import router as health_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# --- Hook de démarrage ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Au démarrage:
    - journalise la config de jeu (plateau, origines),
    - liste les routes (path + méthodes) (diagnostic).
    """
    logger.info(
        "game config: pairs=%d max_players=%d origins=%s persist=%s",
        settings.BOARD_PAIRS, settings.MAX_PLAYERS, settings.ALLOWED_ORIGIN_MARKERS, settings.PERSIST_SESSIONS,
    )
    for r in app.routes:
        methods = getattr(r, "methods", None)
        logger.debug("route %s %s", getattr(r, "path", r), sorted(methods) if methods else "")
    yield


# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ===========================
# CORS
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=cors_origin_regex(),   # ← mêmes marqueurs que origin_required
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# ===========================
# Montage des routers
# ===========================
# Le contrôle d'origine est posé sur chaque router métier (pas sur /health).
app.include_router(game_router)
app.include_router(client_router)
app.include_router(health_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Payload mal formé (ids non entiers, champ manquant…) → 400 invalid_argument."""
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": "invalid_argument",
                "message": "malformed request",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


# --- Racine utile pour "ping" simple (sans /health) ---
@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne."""
    return {"ok": True, "service": "encontre-os-pares-backend"}
