from fastapi import APIRouter, Depends, status

from pharmia.api.v1.dependencies import get_auth_service, get_current_user
from pharmia.db.models.users import User
from pharmia.features.authentication.services import AuthService
from pharmia.features.authentication.schemas import (
    RegisterIn,
    LoginIn,
    LoginOut,
    ForgotPasswordIn,
    ForgotPasswordOut,
    InitiateActivationIn,
    ResetPasswordIn,
    MessageOut,
)
from pharmia.features.users.schemas import UserOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Register
# -----------------------------
@router.post(
    "/register",
    summary="Créer un compte (pharmacien ou préparateur)",
    status_code=status.HTTP_201_CREATED,
    response_model=UserOut,
    responses={
        400: {"description": "Rôle non autorisé ou pharmacien référent invalide"},
        409: {"description": "Email ou pseudo déjà utilisé"},
    },
)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    return svc.register(payload)

# -----------------------------
# Login
# -----------------------------
@router.post(
    "/login",
    summary="Se connecter",
    description="Identifiant = email ou pseudo. Retourne un access token et l'utilisateur (avec `profile_incomplete`).",
    response_model=LoginOut,
    responses={401: {"description": "Identifiants invalides"}},
)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    return svc.login(payload)

# -----------------------------
# Me (profil courant)
# -----------------------------
@router.get(
    "/me",
    summary="Récupérer l'utilisateur courant",
    response_model=UserOut,
    responses={401: {"description": "Token invalide ou expiré"}},
)
def me(user: User = Depends(get_current_user)):
    return user

# -----------------------------
# Mot de passe oublié / activation / réinitialisation
# -----------------------------
@router.post(
    "/forgot-password",
    summary="Demander un lien de réinitialisation",
    description="Réponse identique que l'identifiant existe ou non, sauf pour les comptes migrés sans email.",
    response_model=ForgotPasswordOut,
    response_model_exclude_none=True,
)
def forgot_password(payload: ForgotPasswordIn, svc: AuthService = Depends(get_auth_service)):
    return svc.forgot_password(payload)

@router.post(
    "/initiate-activation",
    summary="Activer un compte migré (associer un email)",
    response_model=MessageOut,
    responses={
        400: {"description": "Compte déjà actif"},
        404: {"description": "Pseudo non trouvé"},
        409: {"description": "Email déjà utilisé"},
    },
)
def initiate_activation(payload: InitiateActivationIn, svc: AuthService = Depends(get_auth_service)):
    return MessageOut(message=svc.initiate_activation(payload))

@router.post(
    "/reset-password",
    summary="Définir un nouveau mot de passe à partir d'un jeton",
    response_model=MessageOut,
    responses={400: {"description": "Jeton invalide ou expiré"}},
)
def reset_password(payload: ResetPasswordIn, svc: AuthService = Depends(get_auth_service)):
    svc.reset_password(payload)
    return MessageOut(message="Mot de passe réinitialisé avec succès.")
