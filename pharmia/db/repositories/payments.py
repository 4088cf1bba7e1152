from typing import Optional
from sqlmodel import select

from pharmia.db.repositories.base import BaseRepository
from pharmia.db.models.payments import Payment

class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    def get_by_ref(self, payment_ref: str) -> Optional[Payment]:
        return self.session.exec(select(self.model).where(self.model.payment_ref == payment_ref)).first()
