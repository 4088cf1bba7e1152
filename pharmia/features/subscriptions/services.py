import logging
from datetime import datetime, timedelta
from typing import Callable, List

from pharmia.core.exceptions import NotFoundError
from pharmia.db.models.base import utcnow
from pharmia.db.models.users import User, UserRole
from pharmia.db.repositories.users import UserRepository
from pharmia.features.subscriptions.policy import add_months
from pharmia.features.subscriptions.schemas import (
    GrantSubscriptionIn,
    PharmacistSubscriptionOut,
    SubscriptionFields,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Abonnements : attribution manuelle (admin), activation après paiement, vue d'ensemble."""

    def __init__(self, user_repo: UserRepository, *, now_fn: Callable[[], datetime] = utcnow):
        self.user_repo = user_repo
        self.now_fn = now_fn

    def grant(self, payload: GrantSubscriptionIn) -> User:
        user = self.user_repo.get(payload.user_id)
        if not user:
            raise NotFoundError("Utilisateur non trouvé.")
        end_date = self.now_fn() + timedelta(days=payload.duration_in_days)
        logger.info(
            "Abonnement %s accordé à l'utilisateur %s jusqu'au %s",
            payload.plan_name, user.id, end_date.isoformat(),
        )
        return self.user_repo.update(
            user,
            has_active_subscription=True,
            subscription_end_date=end_date,
            plan_name=payload.plan_name,
        )

    def activate_paid_plan(self, user: User, *, plan_name: str, is_annual: bool) -> User:
        """Un mois ou un an calendaire à partir de maintenant."""
        end_date = add_months(self.now_fn(), 12 if is_annual else 1)
        logger.info("Abonnement payé %s activé pour l'utilisateur %s jusqu'au %s", plan_name, user.id, end_date.isoformat())
        return self.user_repo.update(
            user,
            has_active_subscription=True,
            subscription_end_date=end_date,
            plan_name=plan_name,
        )

    def overview(self) -> List[PharmacistSubscriptionOut]:
        pharmacists = self.user_repo.list_by_role(UserRole.PHARMACIEN)
        result = []
        for pharmacist in pharmacists:
            item = PharmacistSubscriptionOut.model_validate(pharmacist)
            item.collaborators = [
                SubscriptionFields.model_validate(p) for p in self.user_repo.list_preparateurs_of(pharmacist.id)
            ]
            result.append(item)
        return result
