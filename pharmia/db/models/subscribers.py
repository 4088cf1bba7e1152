from datetime import datetime
from typing import List

from sqlalchemy import Column, DateTime, JSON
from sqlmodel import Field

from .base import BaseModelDB, utcnow


class Subscriber(BaseModelDB, table=True):
    """Abonné à la newsletter, rattaché à des groupes libres."""

    __tablename__ = "subscribers"

    email: str = Field(index=True, unique=True)
    groups: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    subscribed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
