"""
Typed domain records.

WHAT: Pydantic records for every entity read from the datastore
WHY: Datastore rows are plain dicts; the service works on validated types
HOW: Pydantic v2 models validated at the boundary via model_validate
"""

import enum
import math
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


Role = Literal["buyer", "seller"]
UserRole = Literal["user", "admin"]


class NegotiationStatus(str, enum.Enum):
    """Negotiation lifecycle values."""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class DealStatus(str, enum.Enum):
    """Deal lifecycle values."""
    ACTIVE = "active"
    EXECUTED = "executed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class UserIdentity(BaseModel):
    """Authenticated caller as reported by the identity provider."""

    id: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=254)
    display_name: Optional[str] = None
    role: UserRole = "user"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are unique per user regardless of case."""
        return v.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserRecord(BaseModel):
    id: str
    email: str
    display_name: str
    role: UserRole = "user"
    total_negotiations: int = Field(default=0, ge=0)
    created_at: datetime


class NegotiationRecord(BaseModel):
    """Parent record linking two parties."""

    id: str
    title: str
    description: str = ""
    item_link: str = ""
    attachment_url: str = ""
    initiator_id: str
    initiator_role: Role
    counterpart_email: str
    counterpart_id: Optional[str] = None
    status: NegotiationStatus = NegotiationStatus.PENDING
    created_at: datetime
    updated_at: Optional[datetime] = None
    expires_at: datetime

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.initiator_id, self.counterpart_id)


class PriceRangeRecord(BaseModel):
    """One party's private price range."""

    id: str
    negotiation_id: str
    user_id: str
    user_role: Role
    min_price: float = Field(gt=0)
    max_price: float = Field(gt=0)
    submitted_at: datetime

    @field_validator("min_price", "max_price")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v

    @model_validator(mode="after")
    def validate_bounds(self):
        """Ensure min_price <= max_price."""
        if self.min_price > self.max_price:
            raise ValueError(f"min_price ({self.min_price}) must not exceed max_price ({self.max_price})")
        return self


class DealRecord(BaseModel):
    """Persisted negotiation outcome."""

    id: str
    negotiation_id: str
    buyer_id: str
    seller_id: str
    agreed_price: float
    platform_fee: float = Field(ge=0)
    final_price: float
    valid_until: datetime
    status: DealStatus = DealStatus.ACTIVE
    created_at: datetime


class NotificationRecord(BaseModel):
    id: str
    user_id: str
    negotiation_id: Optional[str] = None
    type: str
    title: str
    message: str
    read_status: bool = False
    created_at: datetime
