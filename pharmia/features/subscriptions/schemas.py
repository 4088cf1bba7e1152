from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pharmia.db.models.users import UserRole


class GrantSubscriptionIn(BaseModel):
    user_id: int
    duration_in_days: int = Field(gt=0)
    plan_name: str = Field(min_length=1, max_length=64)


class SubscriptionFields(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    has_active_subscription: bool = False
    subscription_end_date: Optional[datetime] = None
    plan_name: Optional[str] = None


class PharmacistSubscriptionOut(SubscriptionFields):
    collaborators: List[SubscriptionFields] = []


class CleanupOut(BaseModel):
    cleaned_count: int
