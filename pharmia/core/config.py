"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, base, secrets, services externes).

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from pharmia.core.config import settings
print(settings.APP_NAME)

⚠️ JWT_SECRET_KEY n'a pas de valeur par défaut : l'application refuse de démarrer sans secret valide.
"""

from datetime import timedelta
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pharmia.security.tokens import JWTSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "PharmIA"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]
    PUBLIC_APP_URL: str = "http://localhost:5173"

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "pharmia.db"
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth
    # -----------------------------
    JWT_SECRET_KEY: str                   # obligatoire, aucun défaut
    JWT_ISSUER: str = "pharmia-api"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 10
    RESET_TOKEN_TTL_MINUTES: int = 60

    # -----------------------------
    # Abonnements
    # -----------------------------
    FREE_TRIAL_DAYS: int = 7

    # -----------------------------
    # IA générative (Gemini)
    # -----------------------------
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_EMBEDDING_MODEL: str = "models/text-embedding-004"
    AI_MAX_RETRIES: int = 3
    KNOWLEDGE_BASE_AUTO_INDEX: bool = True
    CHAT_TOP_K: int = 5

    # -----------------------------
    # Emails (Brevo)
    # -----------------------------
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_FROM: str = "noreply@pharmia.app"
    EMAIL_FROM_NAME: str = "PharmIA"
    CONTACT_EMAIL: str = "contact@pharmaconseilbmb.com"

    # -----------------------------
    # Paiement (Konnect)
    # -----------------------------
    KONNECT_API_KEY: Optional[str] = None
    KONNECT_WALLET_ID: Optional[str] = None
    KONNECT_API_BASE_URL: str = "https://api.konnect.network/api/v2"
    PUBLIC_API_URL: str = "http://localhost:8080"

    HTTP_TIMEOUT_SECONDS: float = 15.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def _check_jwt_secret(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError("JWT_SECRET_KEY doit contenir au moins 32 caractères")
        return value

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context):  # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")


# Instance globale importable partout
settings = Settings()

# Objet JWT prêt à l'emploi pour les services
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
)
