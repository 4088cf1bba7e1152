"""
➡️ But : Contenir la logique métier des comptes : profil, rattachement préparateur → pharmacien,
visibilité des parcours d'apprentissage.

Lève les exceptions métier (pharmia.core.exceptions), converties en réponses HTTP par l'app.
"""

import logging
from typing import Optional, Sequence

from pharmia.core.exceptions import ConflictError, ForbiddenError, InvalidRequestError, NotFoundError
from pharmia.db.models.users import STAFF_ROLES, User, UserRole
from pharmia.db.repositories.users import UserRepository
from pharmia.features.users.schemas import ProfileUpdateIn
from pharmia.security.password import hash_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repo: UserRepository, *, bcrypt_rounds: Optional[int] = None):
        self.repo = repo
        self.bcrypt_rounds = bcrypt_rounds

    def get(self, user_id: int) -> User:
        user = self.repo.get(user_id)
        if not user:
            raise NotFoundError("Utilisateur non trouvé.")
        return user

    def _require_pharmacist(self, pharmacist_id: int) -> User:
        pharmacist = self.repo.get_with_role(pharmacist_id, UserRole.PHARMACIEN)
        if not pharmacist:
            raise InvalidRequestError("Pharmacien référent invalide.")
        return pharmacist

    # ---------- Profil ----------
    def update_profile(self, user: User, payload: ProfileUpdateIn) -> User:
        changes = {}
        email = payload.email.lower() if payload.email is not None else None
        if email is not None and email != user.email:
            other = self.repo.get_by_email(email)
            if other and other.id != user.id:
                raise ConflictError("Cette adresse email est déjà utilisée.")
            changes["email"] = email
        if payload.password:
            changes["hashed_password"] = hash_password(payload.password, self.bcrypt_rounds)
        for field in ("first_name", "last_name", "phone_number"):
            value = getattr(payload, field)
            if value is not None:
                changes[field] = value
        # seul un préparateur a un pharmacien référent
        if payload.pharmacist_id is not None and user.role == UserRole.PREPARATEUR:
            self._require_pharmacist(payload.pharmacist_id)
            changes["pharmacist_id"] = payload.pharmacist_id

        if not changes:
            return user
        return self.repo.update(user, **changes)

    # ---------- Annuaire ----------
    def list_pharmacists(self) -> Sequence[User]:
        return self.repo.list_by_role(UserRole.PHARMACIEN)

    def list_preparateurs(self) -> Sequence[User]:
        return self.repo.list_by_role(UserRole.PREPARATEUR)

    def assign_pharmacist(self, preparateur_id: int, pharmacist_id: Optional[int]) -> User:
        preparateur = self.repo.get_with_role(preparateur_id, UserRole.PREPARATEUR)
        if not preparateur:
            raise NotFoundError("Préparateur non trouvé.")
        if pharmacist_id is not None:
            self._require_pharmacist(pharmacist_id)
        logger.info("Préparateur %s rattaché au pharmacien %s", preparateur_id, pharmacist_id)
        return self.repo.update(preparateur, pharmacist_id=pharmacist_id)

    def preparateurs_of(self, viewer: User, pharmacist_id: int) -> Sequence[User]:
        if viewer.role not in STAFF_ROLES and viewer.id != pharmacist_id:
            raise ForbiddenError("Accès refusé.")
        return self.repo.list_preparateurs_of(pharmacist_id)

    def learning_journey(self, viewer: User, user_id: int) -> User:
        """Retourne l'utilisateur cible si `viewer` a le droit de voir sa progression."""
        target = self.get(user_id)
        allowed = (
            viewer.id == target.id
            or viewer.role in STAFF_ROLES
            or (viewer.role == UserRole.PHARMACIEN and target.pharmacist_id == viewer.id)
        )
        if not allowed:
            raise ForbiddenError("Accès refusé. Vous n'êtes pas autorisé à voir ce parcours.")
        return target
