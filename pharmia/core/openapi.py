"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI : description, conventions d'API,
schéma d'authentification Bearer.
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API PharmIA : mémofiches de formation officinale, quiz, assistant IA, abonnements.\n\n"
            "### Conventions\n"
            "- Toutes les routes sont préfixées par `/api`.\n"
            "- Authentification : `Authorization: Bearer <JWT>` (obtenu via `/api/auth/login`).\n"
            "- Toutes les heures sont en UTC.\n"
            "- Les erreurs ont la forme `{\"detail\": \"...\"}`.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    openapi_schema["info"]["contact"] = {"name": "PharmIA", "email": "contact@pharmaconseilbmb.com"}
    app.openapi_schema = openapi_schema
    return app.openapi_schema
