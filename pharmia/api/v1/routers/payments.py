from fastapi import APIRouter, Depends, Query

from pharmia.api.v1.dependencies import get_current_user, get_payment_service
from pharmia.db.models.users import User
from pharmia.features.payments.schemas import PaymentInitiateIn, PaymentInitiateOut, WebhookOut
from pharmia.features.payments.services import PaymentService

router = APIRouter(
    prefix="/payment",
    tags=["payments"],
    responses={404: {"description": "Not Found"}},
)

@router.post(
    "/initiate",
    summary="Initier le paiement d'un abonnement (Konnect)",
    response_model=PaymentInitiateOut,
    responses={503: {"description": "Paiement non configuré ou Konnect indisponible"}},
)
def initiate_payment(
    payload: PaymentInitiateIn,
    user: User = Depends(get_current_user),
    svc: PaymentService = Depends(get_payment_service),
):
    return svc.initiate(user, payload)

@router.get(
    "/webhook/konnect",
    summary="Notification de Konnect après paiement",
    response_model=WebhookOut,
)
def konnect_webhook(
    payment_ref: str = Query(..., min_length=1),
    svc: PaymentService = Depends(get_payment_service),
):
    return svc.handle_webhook(payment_ref)
