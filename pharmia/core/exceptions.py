"""
Exceptions métier de PharmIA.

Les services lèvent ces exceptions ; `pharmia.main` enregistre un handler
qui les convertit en réponse JSON `{"detail": ...}` avec le bon code HTTP.
"""

from fastapi import status


class PharmiaError(Exception):
    """Base de toutes les erreurs métier."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Une erreur interne est survenue."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(PharmiaError, LookupError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Ressource introuvable."


class ForbiddenError(PharmiaError, PermissionError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Accès refusé."


class AuthenticationError(PharmiaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentification requise."


class ConflictError(PharmiaError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflit avec une ressource existante."


class InvalidRequestError(PharmiaError, ValueError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Requête invalide."


class GenerationError(PharmiaError):
    """Réponse IA inexploitable ou erreur permanente du fournisseur."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "La génération par l'IA a échoué."


class ServiceUnavailableError(PharmiaError):
    """Service externe non configuré ou toujours en échec après les tentatives."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporairement indisponible."
