"""
ORM models for database persistence.

WHAT: SQLAlchemy models for all database tables
WHY: Persist users, negotiations, price ranges, deals and notifications
HOW: Declarative models with CHECK/UNIQUE constraints mirroring domain invariants
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, Text,
    ForeignKey, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from .database import Base


def _new_id(prefix: str):
    return lambda: f"{prefix}_{uuid4().hex}"


class User(Base):
    """
    User table - platform accounts mirrored from the identity provider.

    WHAT: Profile, role and volume counter for fee tiers
    WHY: Admin stats and dashboards need a local user list
    HOW: Primary key is the identity provider's user id; email is unique
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(254), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    total_negotiations = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="check_user_role"),
        CheckConstraint("total_negotiations >= 0", name="check_total_negotiations_non_negative"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Negotiation(Base):
    """
    Negotiation table - parent record linking two parties.

    WHAT: Item description, initiator/counterpart and lifecycle status
    WHY: Anchor for both price ranges and the resulting deal
    HOW: Status string pending -> completed | expired | cancelled
    """
    __tablename__ = "negotiations"

    id = Column(String(64), primary_key=True, default=_new_id("neg"))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    item_link = Column(String(500), nullable=False, default="")
    attachment_url = Column(String(500), nullable=False, default="")
    initiator_id = Column(String(64), nullable=False)
    initiator_role = Column(String(10), nullable=False)
    counterpart_email = Column(String(254), nullable=False)
    counterpart_id = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    price_ranges = relationship("PriceRange", back_populates="negotiation", cascade="all, delete-orphan")
    deal = relationship("Deal", back_populates="negotiation", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("initiator_role IN ('buyer', 'seller')", name="check_initiator_role"),
        CheckConstraint(
            "status IN ('pending', 'active', 'completed', 'expired', 'cancelled')",
            name="check_negotiation_status"
        ),
        Index("idx_negotiation_initiator", "initiator_id"),
        Index("idx_negotiation_counterpart", "counterpart_id"),
    )

    def __repr__(self):
        return f"<Negotiation(id={self.id}, title={self.title}, status={self.status})>"


class PriceRange(Base):
    """
    PriceRange table - one party's private submission.

    WHAT: Min/max acceptable price for a participant
    WHY: Input to the outcome evaluator once both sides have submitted
    HOW: UNIQUE per (negotiation, user) and per (negotiation, role)
    """
    __tablename__ = "price_ranges"

    id = Column(String(64), primary_key=True, default=_new_id("range"))
    negotiation_id = Column(String(64), ForeignKey("negotiations.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)
    user_role = Column(String(10), nullable=False)
    min_price = Column(Float, nullable=False)
    max_price = Column(Float, nullable=False)
    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    negotiation = relationship("Negotiation", back_populates="price_ranges")

    __table_args__ = (
        UniqueConstraint("negotiation_id", "user_id", name="unique_range_per_user"),
        UniqueConstraint("negotiation_id", "user_role", name="unique_range_per_role"),
        CheckConstraint("user_role IN ('buyer', 'seller')", name="check_range_role"),
        CheckConstraint("min_price > 0", name="check_min_price_positive"),
        CheckConstraint("max_price >= min_price", name="check_max_not_below_min"),
    )

    def __repr__(self):
        return f"<PriceRange(negotiation={self.negotiation_id}, role={self.user_role})>"


class Deal(Base):
    """
    Deal table - persisted outcome of a successful evaluation.

    WHAT: Agreed price, platform fee and final price with a validity window
    WHY: Record of the match shown on dashboards and admin stats
    HOW: One-to-one with Negotiation via unique FK
    """
    __tablename__ = "deals"

    id = Column(String(64), primary_key=True, default=_new_id("deal"))
    negotiation_id = Column(
        String(64), ForeignKey("negotiations.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    buyer_id = Column(String(64), nullable=False)
    seller_id = Column(String(64), nullable=False)
    agreed_price = Column(Float, nullable=False)
    platform_fee = Column(Float, nullable=False)
    final_price = Column(Float, nullable=False)
    valid_until = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    negotiation = relationship("Negotiation", back_populates="deal")

    __table_args__ = (
        CheckConstraint("platform_fee >= 0", name="check_platform_fee_non_negative"),
        CheckConstraint(
            "status IN ('active', 'executed', 'expired', 'cancelled')",
            name="check_deal_status"
        ),
        Index("idx_deal_buyer", "buyer_id"),
        Index("idx_deal_seller", "seller_id"),
    )

    def __repr__(self):
        return f"<Deal(negotiation={self.negotiation_id}, final=${self.final_price})>"


class Notification(Base):
    """Notification table - in-app messages for users."""
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, default=_new_id("notif"))
    user_id = Column(String(64), nullable=False)
    negotiation_id = Column(String(64), nullable=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read_status = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_notification_user", "user_id"),
    )

    def __repr__(self):
        return f"<Notification(user={self.user_id}, type={self.type})>"
