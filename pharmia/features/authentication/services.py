import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from jose import JWTError

from pharmia.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    ServiceUnavailableError,
)
from pharmia.db.models.base import utcnow
from pharmia.db.models.users import User, UserRole
from pharmia.db.repositories.users import UserRepository
from pharmia.security.password import verify_password, hash_password
from pharmia.security.tokens import JWTSettings, create_access_token, decode_token
from pharmia.utils.mailer import Mailer
from pharmia.features.authentication.schemas import (
    RegisterIn,
    LoginIn,
    LoginOut,
    ForgotPasswordIn,
    ForgotPasswordOut,
    InitiateActivationIn,
    ResetPasswordIn,
)
from pharmia.features.users.schemas import UserOut

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES = (UserRole.PHARMACIEN, UserRole.PREPARATEUR)
GENERIC_FORGOT_MESSAGE = (
    "Si votre identifiant est enregistré, vous recevrez des instructions pour réinitialiser votre mot de passe."
)


def new_reset_token() -> str:
    """Jeton de réinitialisation : 20 octets aléatoires en hexadécimal (40 caractères)."""
    return secrets.token_hex(20)


class AuthService:
    """
    Service d'authentification : orchestre le repository utilisateurs, les tokens et l'envoi d'e-mails.
    Ne contient pas d'accès SQL direct et lève des exceptions métier.
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        jwt_settings: JWTSettings,
        mailer: Mailer,
        public_app_url: str,
        reset_ttl: timedelta = timedelta(hours=1),
        bcrypt_rounds: Optional[int] = None,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.user_repo = user_repo
        self.jwt = jwt_settings
        self.mailer = mailer
        self.public_app_url = public_app_url.rstrip("/")
        self.reset_ttl = reset_ttl
        self.bcrypt_rounds = bcrypt_rounds
        self.now_fn = now_fn

    def _reset_url(self, token: str) -> str:
        return f"{self.public_app_url}/#/reset-password?token={token}"

    # ---------- Register ----------
    def register(self, payload: RegisterIn) -> User:
        if payload.role not in SELF_REGISTRATION_ROLES:
            raise InvalidRequestError("Ce rôle ne peut pas être choisi à l'inscription.")
        email = payload.email.lower()
        if self.user_repo.get_by_email(email):
            raise ConflictError("Un utilisateur avec cet email existe déjà.")
        if self.user_repo.get_by_username(payload.username):
            raise ConflictError("Ce pseudo est déjà pris.")

        pharmacist_id = None
        if payload.role == UserRole.PREPARATEUR:
            if payload.pharmacist_id is None:
                raise InvalidRequestError("Pharmacien référent est requis pour les préparateurs.")
            if not self.user_repo.get_with_role(payload.pharmacist_id, UserRole.PHARMACIEN):
                raise InvalidRequestError("Pharmacien référent invalide.")
            pharmacist_id = payload.pharmacist_id

        user = self.user_repo.create(
            email=email,
            username=payload.username,
            hashed_password=hash_password(payload.password, self.bcrypt_rounds),
            role=payload.role,
            first_name=payload.first_name,
            last_name=payload.last_name,
            pharmacist_id=pharmacist_id,
        )
        logger.info("Nouvel utilisateur inscrit : %s (%s)", user.username, user.role.value)
        return user

    # ---------- Login ----------
    def login(self, payload: LoginIn) -> LoginOut:
        user = self.user_repo.get_by_identifier(payload.identifier)
        if not user or not verify_password(payload.password, user.hashed_password):
            # Ne pas révéler si l'utilisateur existe
            raise AuthenticationError("Identifiants invalides.")

        access = create_access_token(
            user_id=user.id,
            email=user.email or "",
            role=user.role.value,
            settings=self.jwt,
        )
        return LoginOut(
            access_token=access,
            token_type="bearer",
            expires_in=int(self.jwt.access_ttl.total_seconds()),
            user=UserOut.model_validate(user),
        )

    # ---------- Current user depuis access token ----------
    def get_current_user(self, *, access_token: str) -> User:
        try:
            decoded = decode_token(access_token, self.jwt)
        except JWTError:
            raise AuthenticationError("Jeton invalide ou expiré.")

        if decoded.get("typ") != "access":
            raise AuthenticationError("Type de jeton invalide.")

        user = self.user_repo.get(int(decoded["sub"]))
        if not user:
            raise AuthenticationError("Utilisateur introuvable.")
        return user

    # ---------- Mot de passe oublié ----------
    def forgot_password(self, payload: ForgotPasswordIn) -> ForgotPasswordOut:
        user = self.user_repo.get_by_identifier(payload.identifier)
        if user and not user.has_valid_email:
            # compte migré sans e-mail : le client bascule sur l'activation
            return ForgotPasswordOut(migration_required=True, username=user.username)

        if user:
            token = new_reset_token()
            self.user_repo.update(
                user,
                reset_password_token=token,
                reset_password_expires=self.now_fn() + self.reset_ttl,
            )
            try:
                self.mailer.send_template(
                    to=user.email,
                    subject="Réinitialisation de votre mot de passe PharmIA",
                    template_name="reset_password.html",
                    context={
                        "first_name": user.first_name,
                        "reset_url": self._reset_url(token),
                        "ttl_minutes": int(self.reset_ttl.total_seconds() // 60),
                    },
                )
            except ServiceUnavailableError:
                # même réponse qu'un identifiant inconnu
                logger.error("E-mail de réinitialisation non envoyé pour l'utilisateur %s", user.id)

        return ForgotPasswordOut(message=GENERIC_FORGOT_MESSAGE)

    # ---------- Activation des comptes migrés ----------
    def initiate_activation(self, payload: InitiateActivationIn) -> str:
        user = self.user_repo.get_by_username(payload.username)
        if not user:
            raise NotFoundError("Pseudo non trouvé.")
        if user.has_valid_email:
            raise InvalidRequestError("Ce compte est déjà actif.")
        email = payload.email.lower()
        if self.user_repo.get_by_email(email):
            raise ConflictError("Cette adresse email est déjà utilisée par un autre compte.")

        token = new_reset_token()
        self.user_repo.update(
            user,
            commit=False,
            email=email,
            reset_password_token=token,
            reset_password_expires=self.now_fn() + self.reset_ttl,
        )
        try:
            self.mailer.send_template(
                to=email,
                subject="Activez votre compte PharmIA",
                template_name="activation.html",
                context={
                    "username": user.username,
                    "reset_url": self._reset_url(token),
                    "ttl_minutes": int(self.reset_ttl.total_seconds() // 60),
                },
            )
        except ServiceUnavailableError:
            # sans lien d'activation le compte doit rester activable
            self.user_repo.rollback()
            raise
        self.user_repo.commit()
        logger.info("Activation initiée pour le compte migré %s", user.username)
        return f"Un lien d'activation a été envoyé à {email}."

    # ---------- Réinitialisation ----------
    def reset_password(self, payload: ResetPasswordIn) -> None:
        user = self.user_repo.get_by_reset_token(payload.token, now=self.now_fn())
        if not user:
            raise InvalidRequestError("Jeton de réinitialisation invalide ou expiré.")
        self.user_repo.update(
            user,
            hashed_password=hash_password(payload.new_password, self.bcrypt_rounds),
            reset_password_token=None,
            reset_password_expires=None,
        )
        logger.info("Mot de passe réinitialisé pour l'utilisateur %s", user.id)
