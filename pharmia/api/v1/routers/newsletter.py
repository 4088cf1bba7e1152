from typing import List

from fastapi import APIRouter, Depends, status

from pharmia.api.v1.dependencies import get_newsletter_service, require_admin
from pharmia.features.authentication.schemas import MessageOut
from pharmia.features.newsletter.schemas import (
    GroupsUpdateIn,
    NewsletterSendIn,
    NewsletterSendOut,
    SubscribeIn,
    SubscriberOut,
)
from pharmia.features.newsletter.services import NewsletterService

router = APIRouter(
    tags=["newsletter"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Public
# -----------------------------
@router.post(
    "/subscribe",
    summary="S'inscrire à la newsletter",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageOut,
    responses={400: {"description": "Adresse déjà inscrite"}},
)
def subscribe(payload: SubscribeIn, svc: NewsletterService = Depends(get_newsletter_service)):
    svc.subscribe(payload.email)
    return MessageOut(message="Inscription à la newsletter confirmée.")

@router.post(
    "/unsubscribe",
    summary="Se désabonner de la newsletter",
    response_model=MessageOut,
)
def unsubscribe(payload: SubscribeIn, svc: NewsletterService = Depends(get_newsletter_service)):
    svc.unsubscribe(payload.email)
    return MessageOut(message="Si cette adresse était inscrite, elle a été désabonnée.")

# -----------------------------
# Admin
# -----------------------------
@router.get(
    "/subscribers",
    summary="Lister les abonnés",
    response_model=List[SubscriberOut],
    dependencies=[Depends(require_admin)],
)
def list_subscribers(svc: NewsletterService = Depends(get_newsletter_service)):
    return svc.list()

@router.get(
    "/subscribers/groups",
    summary="Lister les groupes existants",
    response_model=List[str],
    dependencies=[Depends(require_admin)],
)
def list_groups(svc: NewsletterService = Depends(get_newsletter_service)):
    return svc.all_groups()

@router.put(
    "/subscribers/{subscriber_id}/groups",
    summary="Remplacer les groupes d'un abonné",
    response_model=SubscriberOut,
    dependencies=[Depends(require_admin)],
)
def set_groups(subscriber_id: int, payload: GroupsUpdateIn, svc: NewsletterService = Depends(get_newsletter_service)):
    return svc.set_groups(subscriber_id, payload.groups)

@router.post(
    "/newsletter/send",
    summary="Envoyer une newsletter",
    description="Groupes vides = tous les abonnés. `test_email` envoie uniquement à cette adresse. "
    "Les adresses en échec sont listées dans `failed`.",
    response_model=NewsletterSendOut,
    dependencies=[Depends(require_admin)],
)
def send_newsletter(payload: NewsletterSendIn, svc: NewsletterService = Depends(get_newsletter_service)):
    return svc.send(payload)
