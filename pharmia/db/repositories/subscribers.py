from typing import Optional, Sequence
from sqlmodel import func, select

from pharmia.db.repositories.base import BaseRepository
from pharmia.db.models.subscribers import Subscriber

class SubscriberRepository(BaseRepository[Subscriber]):
    model = Subscriber

    def get_by_email(self, email: str) -> Optional[Subscriber]:
        return self.session.exec(select(self.model).where(func.lower(self.model.email) == email.lower())).first()

    def list_ordered(self) -> Sequence[Subscriber]:
        return self.session.exec(select(self.model).order_by(self.model.email.asc())).all()
