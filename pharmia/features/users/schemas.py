"""
➡️ But : Définir les formats d'entrée/sortie de l'API pour les utilisateurs (couche validation).

UserOut → réponse publique (jamais de hash ni de jeton de réinitialisation)

ProfileUpdateIn → corps de PUT /user/profile

Sépare les modèles "de stockage" (ORM) de ceux "de transfert" (I/O API).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pharmia.db.models.users import UserRole
from pharmia.security.password import PasswordStr


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    username: str
    role: UserRole
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    pharmacist_id: Optional[int] = None
    has_active_subscription: bool = False
    subscription_end_date: Optional[datetime] = None
    plan_name: Optional[str] = None
    created_at: datetime
    profile_incomplete: bool = False


class PharmacistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ProfileUpdateIn(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[PasswordStr] = None
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    pharmacist_id: Optional[int] = None


class AssignPharmacistIn(BaseModel):
    pharmacist_id: Optional[int] = Field(default=None, description="null pour détacher le préparateur")
