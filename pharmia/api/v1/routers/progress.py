from fastapi import APIRouter, Depends

from pharmia.api.v1.dependencies import get_current_user, get_progress_service
from pharmia.db.models.users import User
from pharmia.features.progress.schemas import (
    ProgressOut,
    TrackMediaViewIn,
    TrackQuizCompletionIn,
    TrackReadFicheIn,
)
from pharmia.features.progress.services import ProgressService

router = APIRouter(
    prefix="/user",
    tags=["progress"],
)

@router.get("/progress", summary="Progression de l'utilisateur courant", response_model=ProgressOut)
def get_progress(user: User = Depends(get_current_user)):
    return user

@router.post("/track-read-fiche", summary="Marquer une fiche comme lue", response_model=ProgressOut)
def track_read_fiche(
    payload: TrackReadFicheIn,
    user: User = Depends(get_current_user),
    svc: ProgressService = Depends(get_progress_service),
):
    return svc.track_read_fiche(user, payload.fiche_id)

@router.post("/track-media-view", summary="Marquer un média comme vu", response_model=ProgressOut)
def track_media_view(
    payload: TrackMediaViewIn,
    user: User = Depends(get_current_user),
    svc: ProgressService = Depends(get_progress_service),
):
    return svc.track_media_view(user, payload.media_id)

@router.post("/track-quiz-completion", summary="Enregistrer un quiz terminé", response_model=ProgressOut)
def track_quiz_completion(
    payload: TrackQuizCompletionIn,
    user: User = Depends(get_current_user),
    svc: ProgressService = Depends(get_progress_service),
):
    return svc.track_quiz_completion(user, payload)
