from pydantic import BaseModel, Field


class PaymentInitiateIn(BaseModel):
    plan_name: str = Field(min_length=1, max_length=64)
    amount: float = Field(gt=0, description="Montant en dinars (TND)")
    is_annual: bool = False


class PaymentInitiateOut(BaseModel):
    pay_url: str


class WebhookOut(BaseModel):
    message: str
    status: str
