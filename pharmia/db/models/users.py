"""
➡️ But : Définir la structure des tables de la base (ORM).

Représente les objets persistés. Ici on représente la table des utilisateurs,
qui porte aussi l'état d'abonnement et la progression pédagogique.

Chaque champ = une colonne SQL (avec type, index, clé primaire...).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, JSON
from sqlmodel import Field

from .base import BaseModelDB


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    FORMATEUR = "FORMATEUR"
    PHARMACIEN = "PHARMACIEN"
    PREPARATEUR = "PREPARATEUR"


STAFF_ROLES = (UserRole.ADMIN, UserRole.FORMATEUR)


class User(BaseModelDB, table=True):
    __tablename__ = "users"

    # Identité
    email: Optional[str] = Field(default=None, index=True, unique=True)
    username: str = Field(index=True, unique=True)
    hashed_password: Optional[str] = None
    role: UserRole = Field(default=UserRole.PHARMACIEN, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None

    # Pharmacien référent (préparateurs uniquement)
    pharmacist_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    # Abonnement
    has_active_subscription: bool = Field(default=False)
    subscription_end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    plan_name: Optional[str] = None

    # Progression
    read_fiche_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    viewed_media_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    quiz_history: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    # Réinitialisation / activation
    reset_password_token: Optional[str] = Field(default=None, index=True)
    reset_password_expires: Optional[datetime] = Field(default=None, sa_type=DateTime)

    @property
    def has_valid_email(self) -> bool:
        # les comptes migrés n'ont parfois qu'un pseudo dans le champ email
        return bool(self.email and "@" in self.email)

    @property
    def profile_incomplete(self) -> bool:
        return (
            not self.first_name
            or not self.last_name
            or not self.email
            or (self.role == UserRole.PREPARATEUR and not self.pharmacist_id)
        )
