"""
Client HTTP minimal pour la passerelle de paiement Konnect.

- init_payment() : POST /payments/init-payment → {payUrl, paymentRef}
- get_payment()  : GET /payments/{ref} → {"payment": {...}} (None si inconnu)
"""

import logging
from typing import Any, Dict, Optional

import httpx

from pharmia.core.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


class KonnectClient:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        wallet_id: Optional[str],
        base_url: str,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.wallet_id = wallet_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.wallet_id)

    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key or "", "Content-Type": "application/json"}

    def init_payment(
        self,
        *,
        amount_millimes: int,
        order_id: str,
        description: str,
        webhook_url: str,
        first_name: str = "",
        last_name: str = "",
        phone_number: str = "",
        email: str = "",
    ) -> Dict[str, Any]:
        if not self.configured:
            raise ServiceUnavailableError("Le paiement en ligne n'est pas configuré.")

        payload = {
            "receiverWalletId": self.wallet_id,
            "token": "TND",
            "amount": amount_millimes,
            "type": "immediate",
            "description": description,
            "acceptedPaymentMethods": ["wallet", "bank_card", "e-DINAR"],
            "lifespan": 60,
            "checkoutForm": True,
            "addPaymentFeesToAmount": False,
            "firstName": first_name,
            "lastName": last_name,
            "phoneNumber": phone_number,
            "email": email,
            "orderId": order_id,
            "webhook": webhook_url,
            "theme": "light",
        }
        try:
            response = httpx.post(
                f"{self.base_url}/payments/init-payment",
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Konnect init-payment en échec (commande %s)", order_id, exc_info=True)
            raise ServiceUnavailableError("Impossible d'initier le paiement.") from exc
        return response.json()

    def get_payment(self, payment_ref: str) -> Optional[Dict[str, Any]]:
        if not self.api_key:
            raise ServiceUnavailableError("Le paiement en ligne n'est pas configuré.")
        try:
            response = httpx.get(
                f"{self.base_url}/payments/{payment_ref}",
                headers=self._headers(),
                timeout=self.timeout,
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Konnect : lecture du paiement %s impossible", payment_ref, exc_info=True)
            raise ServiceUnavailableError("Impossible de vérifier le paiement.") from exc
        return response.json().get("payment")
