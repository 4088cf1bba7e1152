"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_memofiche_service() : crée un MemoFicheService à partir d'une session DB.

get_current_user() / require_admin() : identité et rôle de l'appelant depuis le jeton Bearer.

get_ai_client(), get_mailer(), get_konnect_client() : clients externes, remplaçables en test
via app.dependency_overrides.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from pharmia.core.config import settings, jwt_settings
from pharmia.core.exceptions import AuthenticationError, ForbiddenError
from pharmia.db.session import get_session
from pharmia.db.models.users import STAFF_ROLES, User, UserRole

from pharmia.db.repositories.users import UserRepository
from pharmia.db.repositories.memofiches import MemoFicheRepository
from pharmia.db.repositories.memofiche_chunks import MemoFicheChunkRepository
from pharmia.db.repositories.subscribers import SubscriberRepository
from pharmia.db.repositories.payments import PaymentRepository

from pharmia.features.authentication.services import AuthService
from pharmia.features.users.services import UserService
from pharmia.features.progress.services import ProgressService
from pharmia.features.subscriptions.policy import AccessPolicy
from pharmia.features.subscriptions.services import SubscriptionService
from pharmia.features.memofiches.services import MemoFicheService
from pharmia.features.knowledge_base.services import KnowledgeBaseService
from pharmia.features.generation.services import GenerationService
from pharmia.features.chat.services import ChatService
from pharmia.features.payments.services import PaymentService
from pharmia.features.newsletter.services import NewsletterService
from pharmia.features.contact.services import ContactService

from pharmia.utils.gemini import GeminiClient
from pharmia.utils.mailer import Mailer
from pharmia.utils.konnect import KonnectClient


# -----------------------------
# External clients
# -----------------------------
@lru_cache
def get_ai_client() -> GeminiClient:
    return GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        embedding_model=settings.GEMINI_EMBEDDING_MODEL,
        max_retries=settings.AI_MAX_RETRIES,
    )

@lru_cache
def get_mailer() -> Mailer:
    return Mailer(
        api_key=settings.EMAIL_API_KEY,
        api_url=settings.EMAIL_API_URL,
        sender_email=settings.EMAIL_FROM,
        sender_name=settings.EMAIL_FROM_NAME,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

@lru_cache
def get_konnect_client() -> KonnectClient:
    return KonnectClient(
        api_key=settings.KONNECT_API_KEY,
        wallet_id=settings.KONNECT_WALLET_ID,
        base_url=settings.KONNECT_API_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

def get_access_policy() -> AccessPolicy:
    return AccessPolicy(trial_days=settings.FREE_TRIAL_DAYS)


# -----------------------------
# Repositories
# -----------------------------
def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)

def get_memofiche_repository(session: Session = Depends(get_session)) -> MemoFicheRepository:
    return MemoFicheRepository(session)

def get_chunk_repository(session: Session = Depends(get_session)) -> MemoFicheChunkRepository:
    return MemoFicheChunkRepository(session)

def get_subscriber_repository(session: Session = Depends(get_session)) -> SubscriberRepository:
    return SubscriberRepository(session)

def get_payment_repository(session: Session = Depends(get_session)) -> PaymentRepository:
    return PaymentRepository(session)


# -----------------------------
# Auth & users
# -----------------------------
def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(
        user_repo=user_repo,
        jwt_settings=jwt_settings,
        mailer=mailer,
        public_app_url=settings.PUBLIC_APP_URL,
        reset_ttl=timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )

def get_user_service(user_repo: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(user_repo, bcrypt_rounds=settings.BCRYPT_ROUNDS)

def get_progress_service(
    user_repo: UserRepository = Depends(get_user_repository),
    fiche_repo: MemoFicheRepository = Depends(get_memofiche_repository),
) -> ProgressService:
    return ProgressService(user_repo, fiche_repo)

def get_subscription_service(user_repo: UserRepository = Depends(get_user_repository)) -> SubscriptionService:
    return SubscriptionService(user_repo)


# -----------------------------
# Contenu & IA
# -----------------------------
def get_knowledge_base_service(
    fiche_repo: MemoFicheRepository = Depends(get_memofiche_repository),
    chunk_repo: MemoFicheChunkRepository = Depends(get_chunk_repository),
    ai: GeminiClient = Depends(get_ai_client),
) -> KnowledgeBaseService:
    return KnowledgeBaseService(fiche_repo=fiche_repo, chunk_repo=chunk_repo, ai=ai)

def get_memofiche_service(
    repo: MemoFicheRepository = Depends(get_memofiche_repository),
    chunk_repo: MemoFicheChunkRepository = Depends(get_chunk_repository),
    knowledge_base: KnowledgeBaseService = Depends(get_knowledge_base_service),
    policy: AccessPolicy = Depends(get_access_policy),
) -> MemoFicheService:
    return MemoFicheService(
        repo=repo,
        chunk_repo=chunk_repo,
        knowledge_base=knowledge_base,
        policy=policy,
        auto_index=settings.KNOWLEDGE_BASE_AUTO_INDEX,
    )

def get_generation_service(ai: GeminiClient = Depends(get_ai_client)) -> GenerationService:
    return GenerationService(ai)

def get_chat_service(
    ai: GeminiClient = Depends(get_ai_client),
    knowledge_base: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> ChatService:
    return ChatService(ai=ai, knowledge_base=knowledge_base, top_k=settings.CHAT_TOP_K)


# -----------------------------
# Paiements, newsletter, contact
# -----------------------------
def get_payment_service(
    payment_repo: PaymentRepository = Depends(get_payment_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
    konnect: KonnectClient = Depends(get_konnect_client),
) -> PaymentService:
    return PaymentService(
        payment_repo=payment_repo,
        user_repo=user_repo,
        subscriptions=subscriptions,
        konnect=konnect,
        webhook_url=f"{settings.PUBLIC_API_URL.rstrip('/')}{settings.API_PREFIX}/payment/webhook/konnect",
    )

def get_newsletter_service(
    repo: SubscriberRepository = Depends(get_subscriber_repository),
    mailer: Mailer = Depends(get_mailer),
) -> NewsletterService:
    return NewsletterService(repo=repo, mailer=mailer, public_app_url=settings.PUBLIC_APP_URL)

def get_contact_service(mailer: Mailer = Depends(get_mailer)) -> ContactService:
    return ContactService(mailer=mailer, contact_email=settings.CONTACT_EMAIL)


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Authentification requise.")
    return credentials.credentials

def get_current_user(
    access_token: str = Depends(get_access_token_from_bearer),
    svc: AuthService = Depends(get_auth_service),
) -> User:
    return svc.get_current_user(access_token=access_token)

def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise ForbiddenError("Accès réservé aux administrateurs.")
    return user

def require_staff(user: User = Depends(get_current_user)) -> User:
    if user.role not in STAFF_ROLES:
        raise ForbiddenError("Accès réservé aux administrateurs et formateurs.")
    return user

def require_premium(
    user: User = Depends(get_current_user),
    policy: AccessPolicy = Depends(get_access_policy),
) -> User:
    """Abonnement actif, semaine d'essai ou rôle éditorial."""
    if not policy.can_use_premium(user):
        raise ForbiddenError("Un abonnement actif est requis pour cette fonctionnalité.")
    return user
