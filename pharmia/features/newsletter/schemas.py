from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SubscribeIn(BaseModel):
    email: EmailStr


class SubscriberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    groups: List[str] = []
    subscribed_at: datetime


class GroupsUpdateIn(BaseModel):
    groups: List[str]


class NewsletterSendIn(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    html_content: str = Field(min_length=1)
    groups: List[str] = Field(default_factory=list, description="Vide = tous les abonnés")
    test_email: Optional[EmailStr] = None


class NewsletterSendOut(BaseModel):
    recipients: int
    sent: int
    failed: List[str] = []
