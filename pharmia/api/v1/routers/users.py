"""
➡️ But : Endpoints des comptes : profil, annuaire des pharmaciens, rattachement des préparateurs,
parcours d'apprentissage.

Les routes ne contiennent ni SQL ni logique métier : elles délèguent à UserService.
"""

from typing import List

from fastapi import APIRouter, Depends

from pharmia.api.v1.dependencies import get_current_user, get_user_service, require_admin
from pharmia.db.models.users import User
from pharmia.features.progress.schemas import ProgressOut
from pharmia.features.users.schemas import AssignPharmacistIn, PharmacistOut, ProfileUpdateIn, UserOut
from pharmia.features.users.services import UserService

router = APIRouter(
    tags=["users"],
    responses={404: {"description": "Not Found"}},
)

@router.put(
    "/user/profile",
    summary="Mettre à jour son profil",
    response_model=UserOut,
    responses={409: {"description": "Email déjà utilisé"}},
)
def update_profile(
    payload: ProfileUpdateIn,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return svc.update_profile(user, payload)

@router.get(
    "/users/pharmacists",
    summary="Lister les pharmaciens (inscription des préparateurs)",
    response_model=List[PharmacistOut],
)
def list_pharmacists(svc: UserService = Depends(get_user_service)):
    return svc.list_pharmacists()

@router.get(
    "/users/preparateurs",
    summary="Lister les préparateurs",
    response_model=List[UserOut],
    dependencies=[Depends(require_admin)],
)
def list_preparateurs(svc: UserService = Depends(get_user_service)):
    return svc.list_preparateurs()

@router.put(
    "/users/{user_id}/assign-pharmacist",
    summary="Rattacher un préparateur à un pharmacien",
    description="`pharmacist_id: null` détache le préparateur.",
    response_model=UserOut,
    dependencies=[Depends(require_admin)],
)
def assign_pharmacist(user_id: int, payload: AssignPharmacistIn, svc: UserService = Depends(get_user_service)):
    return svc.assign_pharmacist(user_id, payload.pharmacist_id)

@router.get(
    "/users/preparateurs-by-pharmacist/{pharmacist_id}",
    summary="Préparateurs rattachés à un pharmacien",
    response_model=List[UserOut],
    responses={403: {"description": "Ni le pharmacien concerné, ni admin/formateur"}},
)
def preparateurs_by_pharmacist(
    pharmacist_id: int,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return svc.preparateurs_of(user, pharmacist_id)

@router.get(
    "/users/{user_id}/learning-journey",
    summary="Parcours d'apprentissage d'un utilisateur",
    response_model=ProgressOut,
    responses={403: {"description": "Accès refusé"}},
)
def learning_journey(
    user_id: int,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return svc.learning_journey(user, user_id)

@router.get(
    "/users/{user_id}",
    summary="Récupérer un utilisateur",
    response_model=UserOut,
    dependencies=[Depends(get_current_user)],
)
def get_user(user_id: int, svc: UserService = Depends(get_user_service)):
    return svc.get(user_id)
