"""
➡️ But : Endpoints des mémofiches.

Lecture : authentifiée, filtrée par la politique d'accès (is_locked / 403).
Écriture : admin ou formateur ; suppression : admin.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from pharmia.api.v1.dependencies import (
    get_chat_service,
    get_current_user,
    get_memofiche_service,
    require_admin,
    require_staff,
)
from pharmia.db.models.users import User
from pharmia.features.chat.services import ChatService
from pharmia.features.memofiches.schemas import (
    AssistantIn,
    AssistantOut,
    CountOut,
    FicheDetailsIn,
    FicheDetailsOut,
    MemoFicheCreate,
    MemoFicheOut,
    MemoFicheSummaryOut,
    MemoFicheUpdate,
)
from pharmia.features.memofiches.services import MemoFicheService

router = APIRouter(
    prefix="/memofiches",
    tags=["memofiches"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Lecture
# -----------------------------
@router.get(
    "",
    summary="Lister les mémofiches",
    description="Les plus récentes d'abord. Chaque élément indique `is_locked` selon l'abonnement de l'appelant.",
    response_model=List[MemoFicheSummaryOut],
)
def list_memofiches(
    theme: Optional[str] = Query(None, description="Filtre exact sur le thème"),
    system: Optional[str] = Query(None, description="Filtre exact sur le système/organe"),
    q: Optional[str] = Query(None, description="Recherche dans le titre"),
    user: User = Depends(get_current_user),
    svc: MemoFicheService = Depends(get_memofiche_service),
):
    return svc.list_for(user, theme=theme, system=system, q=q)

@router.get("/count", summary="Nombre de mémofiches", response_model=CountOut)
def count_memofiches(svc: MemoFicheService = Depends(get_memofiche_service)):
    return CountOut(count=svc.count())

@router.post(
    "/details",
    summary="Titres et thèmes d'une liste de fiches",
    response_model=List[FicheDetailsOut],
    responses={400: {"description": "Liste d'identifiants vide"}},
)
def memofiche_details(
    payload: FicheDetailsIn,
    user: User = Depends(get_current_user),
    svc: MemoFicheService = Depends(get_memofiche_service),
):
    return svc.details_for(user, payload.ids)

@router.get(
    "/{fiche_id}",
    summary="Récupérer une mémofiche",
    response_model=MemoFicheOut,
    responses={403: {"description": "Contenu réservé aux abonnés"}},
)
def get_memofiche(
    fiche_id: int,
    user: User = Depends(get_current_user),
    svc: MemoFicheService = Depends(get_memofiche_service),
):
    return svc.get_for(user, fiche_id)

# -----------------------------
# Écriture
# -----------------------------
@router.post(
    "",
    summary="Créer une mémofiche",
    status_code=status.HTTP_201_CREATED,
    response_model=MemoFicheOut,
    dependencies=[Depends(require_staff)],
)
def create_memofiche(payload: MemoFicheCreate, svc: MemoFicheService = Depends(get_memofiche_service)):
    return svc.create(payload)

@router.put(
    "/{fiche_id}",
    summary="Mettre à jour une mémofiche (champs envoyés uniquement)",
    response_model=MemoFicheOut,
    dependencies=[Depends(require_staff)],
)
def update_memofiche(fiche_id: int, payload: MemoFicheUpdate, svc: MemoFicheService = Depends(get_memofiche_service)):
    return svc.update(fiche_id, payload)

@router.delete(
    "/{fiche_id}",
    summary="Supprimer une mémofiche et ses fragments",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_memofiche(fiche_id: int, svc: MemoFicheService = Depends(get_memofiche_service)):
    svc.delete(fiche_id)
    return None

# -----------------------------
# Assistant de la fiche
# -----------------------------
@router.post(
    "/{fiche_id}/assistant",
    summary="Poser une question à l'assistant de la fiche",
    response_model=AssistantOut,
    responses={403: {"description": "Contenu réservé aux abonnés"}},
)
def fiche_assistant(
    fiche_id: int,
    payload: AssistantIn,
    user: User = Depends(get_current_user),
    svc: MemoFicheService = Depends(get_memofiche_service),
    chat: ChatService = Depends(get_chat_service),
):
    fiche = svc.get_for(user, fiche_id)
    return AssistantOut(response=chat.fiche_assistant(fiche, payload.messages))
