from enum import Enum
from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Payment(BaseModelDB, table=True):
    """Paiement d'abonnement initié auprès de Konnect."""

    __tablename__ = "payments"

    user_id: int = Field(index=True, foreign_key="users.id")
    plan_name: str
    amount: float = Field(gt=0)
    is_annual: bool = Field(default=False)
    payment_ref: Optional[str] = Field(default=None, index=True)
    status: PaymentStatus = Field(default=PaymentStatus.PENDING)
