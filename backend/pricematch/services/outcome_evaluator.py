"""
Outcome evaluator for blind price negotiations.

WHAT: Decide whether two private price ranges produce a deal
WHY: The only pricing logic in the platform; must be exact and side-effect free
HOW: Range intersection test, volume-tiered platform fee, deal construction

The evaluator never touches the datastore. Callers load both ranges,
call evaluate_outcome() once per negotiation and persist the returned
DealTerms themselves.
"""

import enum
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..models.domain import PriceRangeRecord, DealStatus
from ..utils.exceptions import InvalidPriceRangeError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# (minimum prior negotiation count, fee rate), highest threshold first
FEE_TIERS: Tuple[Tuple[int, float], ...] = (
    (100, 0.005),
    (50, 0.007),
    (20, 0.008),
    (10, 0.009),
    (0, 0.01),
)

DEFAULT_SPLIT = 0.5
DEFAULT_VALIDITY = timedelta(days=7)


class NoDealReason(str, enum.Enum):
    """Why an evaluation produced no deal."""
    NO_OVERLAP = "no_overlap"
    FEE_EXCEEDS_MARGIN = "fee_exceeds_margin"


@dataclass(frozen=True)
class DealTerms:
    """Fully populated deal candidate ready to persist."""
    negotiation_id: str
    buyer_id: str
    seller_id: str
    agreed_price: float
    platform_fee: float
    final_price: float
    valid_until: datetime
    status: str = DealStatus.ACTIVE.value

    def to_record(self) -> dict:
        """Fields for the deals collection."""
        return asdict(self)


@dataclass(frozen=True)
class OutcomeEvaluation:
    """Result of one evaluation: either a deal or a no-deal reason."""
    agreed_price: float
    platform_fee: float
    final_price: float
    fee_rate: float
    deal: Optional[DealTerms] = None
    reason: Optional[NoDealReason] = None

    @property
    def deal_found(self) -> bool:
        return self.deal is not None


def fee_rate_for(negotiation_count: int) -> float:
    """
    Look up the platform fee rate for a volume tier.

    Args:
        negotiation_count: Prior negotiations initiated by the requester

    Returns:
        Fee rate as a fraction (0.01 == 1%)
    """
    if isinstance(negotiation_count, bool) or not isinstance(negotiation_count, int):
        raise InvalidPriceRangeError(
            "negotiation count must be an integer",
            details={"negotiation_count": negotiation_count}
        )
    if negotiation_count < 0:
        raise InvalidPriceRangeError(
            "negotiation count must be non-negative",
            details={"negotiation_count": negotiation_count}
        )

    for threshold, rate in FEE_TIERS:
        if negotiation_count >= threshold:
            return rate
    return FEE_TIERS[-1][1]


def calculate_platform_fee(amount: float, negotiation_count: int) -> float:
    """Fee on a pre-fee amount for the given volume tier."""
    return amount * fee_rate_for(negotiation_count)


def _validate_range(price_range: PriceRangeRecord, expected_role: str) -> None:
    """Fail fast on ranges the submission form should have rejected."""
    details = {
        "range_id": getattr(price_range, "id", None),
        "expected_role": expected_role,
    }
    if price_range.user_role != expected_role:
        raise InvalidPriceRangeError(
            f"expected a {expected_role} range, got {price_range.user_role}",
            details=details
        )

    for field in ("min_price", "max_price"):
        value = getattr(price_range, field)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidPriceRangeError(f"{field} must be a finite number", details=details)
        if value <= 0:
            raise InvalidPriceRangeError(f"{field} must be positive", details=details)

    if price_range.min_price > price_range.max_price:
        raise InvalidPriceRangeError(
            f"min_price ({price_range.min_price}) exceeds max_price ({price_range.max_price})",
            details=details
        )


def evaluate_outcome(
    buyer_range: PriceRangeRecord,
    seller_range: PriceRangeRecord,
    requester_negotiation_count: int,
    *,
    now: Optional[datetime] = None,
    split: float = DEFAULT_SPLIT,
    validity: timedelta = DEFAULT_VALIDITY,
) -> OutcomeEvaluation:
    """
    Evaluate a buyer/seller range pair.

    WHAT: Decide deal vs no deal and compute agreed price, fee and final price
    WHY: Core matching rule of the platform
    HOW: agreed = weighted point between buyer max and seller min (midpoint
         by default), fee on the agreed price, deal iff the ranges touch and
         the seller still clears their floor after the fee

    Args:
        buyer_range: Range submitted in the buyer role
        seller_range: Range submitted in the seller role
        requester_negotiation_count: Prior negotiations of the fee-tier owner
        now: Creation time for the deal (defaults to utcnow)
        split: Share of the buyer max in the agreed price (0.5 = midpoint)
        validity: How long the deal stays valid

    Returns:
        OutcomeEvaluation with either deal or reason set

    Raises:
        InvalidPriceRangeError: Malformed input
    """
    _validate_range(buyer_range, "buyer")
    _validate_range(seller_range, "seller")
    if buyer_range.negotiation_id != seller_range.negotiation_id:
        raise InvalidPriceRangeError(
            "ranges belong to different negotiations",
            details={
                "buyer_negotiation_id": buyer_range.negotiation_id,
                "seller_negotiation_id": seller_range.negotiation_id,
            }
        )
    if not 0.0 <= split <= 1.0:
        raise InvalidPriceRangeError("split must be between 0 and 1", details={"split": split})

    buyer_max = buyer_range.max_price
    seller_min = seller_range.min_price

    fee_rate = fee_rate_for(requester_negotiation_count)
    agreed_price = buyer_max * split + seller_min * (1 - split)
    platform_fee = agreed_price * fee_rate
    final_price = agreed_price - platform_fee

    if seller_min > buyer_max:
        logger.info(
            f"No deal for {buyer_range.negotiation_id}: ranges do not overlap "
            f"(seller min {seller_min:.2f} > buyer max {buyer_max:.2f})"
        )
        return OutcomeEvaluation(
            agreed_price=agreed_price,
            platform_fee=platform_fee,
            final_price=final_price,
            fee_rate=fee_rate,
            reason=NoDealReason.NO_OVERLAP,
        )

    if final_price < seller_min:
        logger.info(
            f"No deal for {buyer_range.negotiation_id}: fee {platform_fee:.2f} pushes final "
            f"price {final_price:.2f} below seller min {seller_min:.2f}"
        )
        return OutcomeEvaluation(
            agreed_price=agreed_price,
            platform_fee=platform_fee,
            final_price=final_price,
            fee_rate=fee_rate,
            reason=NoDealReason.FEE_EXCEEDS_MARGIN,
        )

    created_at = now or datetime.utcnow()
    deal = DealTerms(
        negotiation_id=buyer_range.negotiation_id,
        buyer_id=buyer_range.user_id,
        seller_id=seller_range.user_id,
        agreed_price=agreed_price,
        platform_fee=platform_fee,
        final_price=final_price,
        valid_until=created_at + validity,
    )
    logger.info(
        f"Deal for {buyer_range.negotiation_id}: agreed ${agreed_price:.2f}, "
        f"fee ${platform_fee:.2f} ({fee_rate:.1%}), final ${final_price:.2f}"
    )
    return OutcomeEvaluation(
        agreed_price=agreed_price,
        platform_fee=platform_fee,
        final_price=final_price,
        fee_rate=fee_rate,
        deal=deal,
    )
