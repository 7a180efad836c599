"""
Pydantic API schemas.

WHAT: Request and response models for FastAPI
WHY: Type-safe validation and serialization matching frontend interfaces
HOW: Pydantic v2 models with validators and constraints
"""

import math
import re
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime

from .domain import (
    Role, NegotiationRecord, PriceRangeRecord, DealRecord, NotificationRecord, UserRecord
)
from ..core.config import settings

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ========== Request Schemas ==========

class CreateNegotiationRequest(BaseModel):
    """Form fields for a new negotiation."""
    title: str = Field(..., max_length=200, description="Negotiation title")
    description: str = Field(default="", max_length=5000)
    item_link: str = Field(default="", max_length=500, description="Link to the item or service")
    counterpart_email: str = Field(..., max_length=254, description="Email of the other party")
    initiator_role: Role = Field(default="buyer", description="Initiator's side of the deal")
    expiration_days: int = Field(default=settings.DEFAULT_EXPIRATION_DAYS, ge=1)

    @field_validator("title", "description", "item_link", "counterpart_email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v:
            raise ValueError("title is required")
        return v

    @field_validator("counterpart_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("counterpart_email must be a valid email address")
        return v

    @field_validator("expiration_days")
    @classmethod
    def validate_expiration(cls, v: int) -> int:
        if v > settings.MAX_EXPIRATION_DAYS:
            raise ValueError(f"expiration_days must be at most {settings.MAX_EXPIRATION_DAYS}")
        return v


class SubmitPriceRangeRequest(BaseModel):
    """A participant's private price range."""
    min_price: float = Field(..., gt=0, description="Minimum acceptable price")
    max_price: float = Field(..., gt=0, description="Maximum acceptable price")

    @field_validator("min_price", "max_price")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v

    @model_validator(mode="after")
    def validate_price_range(self):
        """Ensure min_price <= max_price."""
        if self.min_price > self.max_price:
            raise ValueError(
                f"Minimum price ({self.min_price}) cannot be greater than maximum price ({self.max_price})"
            )
        return self


# ========== Response Schemas ==========

Progress = Literal["awaiting_ranges", "deal_created", "no_deal_possible"]


class NegotiationSummary(BaseModel):
    """Negotiation as listed on dashboards."""
    id: str
    title: str
    counterpart_email: str
    initiator_role: Role
    status: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_record(cls, record: NegotiationRecord) -> "NegotiationSummary":
        return cls(
            id=record.id,
            title=record.title,
            counterpart_email=record.counterpart_email,
            initiator_role=record.initiator_role,
            status=record.status.value,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )


class NegotiationDetailsResponse(BaseModel):
    """Negotiation as seen by one viewer; the counterpart's range stays hidden."""
    negotiation: NegotiationRecord
    your_role: Optional[Role] = None
    your_range: Optional[PriceRangeRecord] = None
    you_submitted: bool = False
    counterpart_submitted: bool = False
    deal: Optional[DealRecord] = None
    progress: Progress


class EvaluationSummary(BaseModel):
    """What happened after a range was submitted."""
    evaluated: bool = False
    deal_found: bool = False
    reason: Optional[str] = None
    deal: Optional[DealRecord] = None


class SubmitPriceRangeResponse(BaseModel):
    price_range: PriceRangeRecord
    evaluation: EvaluationSummary


class DashboardStats(BaseModel):
    total: int = 0
    active: int = 0
    completed: int = 0
    total_value: float = 0.0


class DashboardResponse(BaseModel):
    stats: DashboardStats
    negotiations: List[NegotiationSummary] = Field(default_factory=list)
    deals: List[DealRecord] = Field(default_factory=list)


class AdminStatsResponse(BaseModel):
    total_users: int = 0
    total_negotiations: int = 0
    active_negotiations: int = 0
    completed_deals: int = 0
    total_revenue: float = 0.0
    average_deal_value: float = 0.0
    conversion_rate: float = 0.0  # percent
    revenue_per_user: float = 0.0
    revenue_per_deal: float = 0.0
    negotiations_per_user: float = 0.0


class FeeTier(BaseModel):
    min_negotiations: int
    max_negotiations: Optional[int] = None
    rate: float


class FeeScheduleResponse(BaseModel):
    tiers: List[FeeTier]


class FeeQuoteResponse(BaseModel):
    amount: float
    negotiation_count: int
    rate: float
    platform_fee: float
    net_amount: float


class UserProfileResponse(BaseModel):
    user: UserRecord


class NotificationListResponse(BaseModel):
    notifications: List[NotificationRecord]
    unread: int
