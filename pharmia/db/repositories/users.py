"""
➡️ But : Encapsuler toutes les opérations de base de données sur les utilisateurs.

UserRepository : CRUD + requêtes spécifiques (identifiant, rôles, rattachement pharmacien).

Ne contient aucune logique métier, juste de la persistance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from sqlmodel import func, select, or_

from pharmia.db.repositories.base import BaseRepository
from pharmia.db.models.users import User, UserRole

class UserRepository(BaseRepository[User]):
    """
    Repository pour la table users.
    Hérite du CRUD générique de BaseRepository.
    """
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        """Les emails sont comparés sans tenir compte de la casse."""
        return self.session.exec(
            select(self.model).where(func.lower(self.model.email) == email.lower())
        ).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.session.exec(select(self.model).where(self.model.username == username)).first()

    def get_by_identifier(self, identifier: str) -> Optional[User]:
        """Recherche par email OU pseudo (connexion, mot de passe oublié)."""
        return self.session.exec(
            select(self.model).where(
                or_(func.lower(self.model.email) == identifier.lower(), self.model.username == identifier)
            )
        ).first()

    def get_by_reset_token(self, token: str, *, now: datetime) -> Optional[User]:
        """Retourne l'utilisateur dont le jeton de réinitialisation est valide à `now`."""
        return self.session.exec(
            select(self.model)
            .where(self.model.reset_password_token == token)
            .where(self.model.reset_password_expires > now)
        ).first()

    def get_with_role(self, user_id: int, role: UserRole) -> Optional[User]:
        user = self.get(user_id)
        if user is None or user.role != role:
            return None
        return user

    def list_by_role(self, role: UserRole) -> Sequence[User]:
        return self.session.exec(
            select(self.model).where(self.model.role == role).order_by(self.model.id.asc())
        ).all()

    def list_preparateurs_of(self, pharmacist_id: int) -> Sequence[User]:
        return self.session.exec(
            select(self.model)
            .where(self.model.role == UserRole.PREPARATEUR)
            .where(self.model.pharmacist_id == pharmacist_id)
            .order_by(self.model.id.asc())
        ).all()
