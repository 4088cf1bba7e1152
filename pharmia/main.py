"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app).

Configure :

le logging (niveau LOG_LEVEL)

CORS (autorisations de qui peut appeler ces API)

les handlers d'erreurs métier → {"detail": ...}

schéma OpenAPI personnalisé

Inclut les routers sous /api et initialise la base au démarrage.

Point unique d'exécution : uvicorn pharmia.main:app --reload.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pharmia.core.config import settings
from pharmia.core.exceptions import PharmiaError
from pharmia.core.openapi import custom_openapi
from pharmia.db.session import init_db

from pharmia.api.v1.routers import (
    admin,
    authentication,
    contact,
    generation,
    health,
    memofiches,
    newsletter,
    payments,
    progress,
    users,
)

import uvicorn

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    openapi_tags=[
        {"name": "auth", "description": "Inscription, connexion, mot de passe"},
        {"name": "users", "description": "Profils et rattachement préparateur → pharmacien"},
        {"name": "progress", "description": "Progression pédagogique"},
        {"name": "memofiches", "description": "Mémofiches de formation"},
        {"name": "ai", "description": "Génération de mémofiches et chat"},
        {"name": "admin", "description": "Abonnements et base de connaissances"},
        {"name": "payments", "description": "Paiement des abonnements (Konnect)"},
        {"name": "newsletter", "description": "Abonnés et envois"},
        {"name": "contact", "description": "Formulaire de contact"},
        {"name": "health", "description": "Supervision"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)


# Erreurs
@app.exception_handler(PharmiaError)
def handle_pharmia_error(request: Request, exc: PharmiaError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s %s → %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("Erreur non gérée sur %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Une erreur interne est survenue."})


# Routers
for module in (
    authentication,
    users,
    progress,
    memofiches,
    generation,
    admin,
    payments,
    newsletter,
    contact,
    health,
):
    app.include_router(module.router, prefix=settings.API_PREFIX)

app.openapi = lambda: custom_openapi(app)

# Démarrage
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s démarré (env=%s)", settings.APP_NAME, settings.ENV)

if __name__ == "__main__":
    uvicorn.run("pharmia.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev"))  # http://localhost:8080
