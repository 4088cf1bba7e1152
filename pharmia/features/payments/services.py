"""
➡️ But : Paiement des abonnements via Konnect.

initiate() : enregistre un paiement "pending", demande un lien de paiement à Konnect
(montant en millimes), mémorise la référence Konnect.

handle_webhook() : relit le paiement chez Konnect ; "completed" active l'abonnement
pour un mois ou un an calendaire, "failed" marque le paiement en échec.
"""

import logging

from pharmia.core.exceptions import NotFoundError, ServiceUnavailableError
from pharmia.db.models.payments import PaymentStatus
from pharmia.db.models.users import User
from pharmia.db.repositories.payments import PaymentRepository
from pharmia.db.repositories.users import UserRepository
from pharmia.features.payments.schemas import PaymentInitiateIn, PaymentInitiateOut, WebhookOut
from pharmia.features.subscriptions.services import SubscriptionService
from pharmia.utils.konnect import KonnectClient

logger = logging.getLogger(__name__)


def to_millimes(amount: float) -> int:
    return int(round(amount * 1000))


class PaymentService:
    def __init__(
        self,
        *,
        payment_repo: PaymentRepository,
        user_repo: UserRepository,
        subscriptions: SubscriptionService,
        konnect: KonnectClient,
        webhook_url: str,
    ):
        self.payment_repo = payment_repo
        self.user_repo = user_repo
        self.subscriptions = subscriptions
        self.konnect = konnect
        self.webhook_url = webhook_url

    def initiate(self, user: User, payload: PaymentInitiateIn) -> PaymentInitiateOut:
        if not self.konnect.configured:
            raise ServiceUnavailableError("Le paiement en ligne n'est pas configuré.")

        payment = self.payment_repo.create(
            user_id=user.id,
            plan_name=payload.plan_name,
            amount=payload.amount,
            is_annual=payload.is_annual,
            status=PaymentStatus.PENDING,
        )
        try:
            data = self.konnect.init_payment(
                amount_millimes=to_millimes(payload.amount),
                order_id=str(payment.id),
                description=f"Abonnement {payload.plan_name}",
                webhook_url=self.webhook_url,
                first_name=user.first_name or "",
                last_name=user.last_name or "",
                phone_number=user.phone_number or "",
                email=user.email or "",
            )
        except ServiceUnavailableError:
            self.payment_repo.update(payment, status=PaymentStatus.FAILED)
            raise
        pay_url, payment_ref = data.get("payUrl"), data.get("paymentRef")
        if not pay_url or not payment_ref:
            logger.error("Réponse Konnect incomplète pour le paiement %s : %s", payment.id, data)
            self.payment_repo.update(payment, status=PaymentStatus.FAILED)
            raise ServiceUnavailableError("Impossible d'initier le paiement.")

        self.payment_repo.update(payment, payment_ref=payment_ref)
        logger.info("Paiement %s initié (%s, %s TND) pour l'utilisateur %s", payment.id, payload.plan_name, payload.amount, user.id)
        return PaymentInitiateOut(pay_url=pay_url)

    def handle_webhook(self, payment_ref: str) -> WebhookOut:
        remote = self.konnect.get_payment(payment_ref)
        if not remote:
            raise NotFoundError("Paiement inconnu de Konnect.")

        payment = self.payment_repo.get_by_ref(payment_ref)
        if not payment:
            logger.error("Paiement local introuvable pour la référence %s", payment_ref)
            raise NotFoundError("Paiement introuvable.")

        remote_status = remote.get("status")
        if remote_status == "completed":
            if payment.status != PaymentStatus.COMPLETED:
                user = self.user_repo.get(payment.user_id)
                if user:
                    self.subscriptions.activate_paid_plan(user, plan_name=payment.plan_name, is_annual=payment.is_annual)
                self.payment_repo.update(payment, status=PaymentStatus.COMPLETED)
        elif remote_status == "failed":
            self.payment_repo.update(payment, status=PaymentStatus.FAILED)

        logger.info("Webhook Konnect %s : statut distant %s", payment_ref, remote_status)
        return WebhookOut(message="Webhook reçu et traité.", status=payment.status.value)
