from fastapi import APIRouter, Depends

from pharmia.api.v1.dependencies import get_contact_service
from pharmia.features.authentication.schemas import MessageOut
from pharmia.features.contact.schemas import ContactIn
from pharmia.features.contact.services import ContactService

router = APIRouter(tags=["contact"])

@router.post(
    "/contact",
    summary="Envoyer un message à l'équipe",
    response_model=MessageOut,
    responses={503: {"description": "Envoi impossible"}},
)
def contact(payload: ContactIn, svc: ContactService = Depends(get_contact_service)):
    svc.send(payload)
    return MessageOut(message="Votre message a été envoyé avec succès.")
