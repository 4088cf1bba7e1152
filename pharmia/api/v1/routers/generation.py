from fastapi import APIRouter, Depends

from pharmia.api.v1.dependencies import get_chat_service, get_generation_service, require_premium, require_staff
from pharmia.features.chat.schemas import CustomChatIn, CustomChatOut
from pharmia.features.chat.services import ChatService
from pharmia.features.generation.schemas import GenerateIn, MemoFicheDraft
from pharmia.features.generation.services import GenerationService

router = APIRouter(
    tags=["ai"],
    responses={
        502: {"description": "Réponse de l'IA inexploitable"},
        503: {"description": "Service d'IA indisponible"},
    },
)

@router.post(
    "/generate",
    summary="Générer un brouillon de mémofiche depuis un texte source",
    description="Le brouillon est validé puis renvoyé ; il n'est pas enregistré.",
    response_model=MemoFicheDraft,
    dependencies=[Depends(require_staff)],
)
def generate(payload: GenerateIn, svc: GenerationService = Depends(get_generation_service)):
    return svc.generate(payload)

@router.post(
    "/custom-chat",
    summary="Chat libre ancré dans la base de connaissances",
    response_model=CustomChatOut,
    dependencies=[Depends(require_premium)],
)
def custom_chat(payload: CustomChatIn, svc: ChatService = Depends(get_chat_service)):
    return svc.custom_chat(payload)
