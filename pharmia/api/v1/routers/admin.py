from typing import List

from fastapi import APIRouter, Depends

from pharmia.api.v1.dependencies import (
    get_knowledge_base_service,
    get_progress_service,
    get_subscription_service,
    require_admin,
)
from pharmia.db.models.users import User
from pharmia.features.knowledge_base.schemas import KnowledgeBaseUpdateOut
from pharmia.features.knowledge_base.services import KnowledgeBaseService
from pharmia.features.progress.services import ProgressService
from pharmia.features.subscriptions.schemas import CleanupOut, GrantSubscriptionIn, PharmacistSubscriptionOut
from pharmia.features.subscriptions.services import SubscriptionService
from pharmia.features.users.schemas import UserOut

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={403: {"description": "Accès réservé aux administrateurs"}},
)

@router.get(
    "/subscribers",
    summary="Pharmaciens, collaborateurs et abonnements",
    response_model=List[PharmacistSubscriptionOut],
)
def list_subscribers(svc: SubscriptionService = Depends(get_subscription_service)):
    return svc.overview()

@router.post(
    "/grant-subscription",
    summary="Accorder un abonnement manuellement",
    response_model=UserOut,
)
def grant_subscription(payload: GrantSubscriptionIn, svc: SubscriptionService = Depends(get_subscription_service)):
    return svc.grant(payload)

@router.post(
    "/cleanup-read-fiches",
    summary="Retirer des fiches lues celles qui n'existent plus",
    response_model=CleanupOut,
)
def cleanup_read_fiches(
    user: User = Depends(require_admin),
    svc: ProgressService = Depends(get_progress_service),
):
    return CleanupOut(cleaned_count=svc.cleanup_read_fiches(user))

@router.post(
    "/update-knowledge-base",
    summary="Reconstruire la base de connaissances du chat",
    response_model=KnowledgeBaseUpdateOut,
)
def update_knowledge_base(svc: KnowledgeBaseService = Depends(get_knowledge_base_service)):
    return svc.rebuild_all()
