from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from pharmia.db.models.users import UserRole
from pharmia.features.users.schemas import UserOut
from pharmia.security.password import PasswordStr

# ---------- Inputs ----------

class RegisterIn(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=64)
    password: PasswordStr
    role: UserRole = UserRole.PHARMACIEN
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    pharmacist_id: Optional[int] = None

class LoginIn(BaseModel):
    identifier: str = Field(min_length=1, description="Email ou pseudo")
    password: str

class ForgotPasswordIn(BaseModel):
    identifier: str = Field(min_length=1)

class InitiateActivationIn(BaseModel):
    username: str = Field(min_length=1)
    email: EmailStr

class ResetPasswordIn(BaseModel):
    token: str = Field(min_length=1)
    new_password: PasswordStr


# ---------- Outputs ----------

class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # secondes (durée de l'access token)
    user: UserOut

class ForgotPasswordOut(BaseModel):
    message: Optional[str] = None
    migration_required: bool = False
    username: Optional[str] = None

class MessageOut(BaseModel):
    message: str
