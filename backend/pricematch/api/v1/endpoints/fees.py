"""
Fee endpoints.

WHAT: Publish the volume-based fee schedule and quote fees
WHY: Participants see what the platform keeps before submitting a range
HOW: Read FEE_TIERS and calculate_platform_fee from the outcome evaluator
"""

import math

from fastapi import APIRouter, Query

from ....models.api_schemas import FeeScheduleResponse, FeeTier, FeeQuoteResponse
from ....services.outcome_evaluator import FEE_TIERS, calculate_platform_fee, fee_rate_for
from ....utils.exceptions import ValidationException

router = APIRouter()


@router.get("/fees/schedule", response_model=FeeScheduleResponse)
async def fee_schedule():
    """Fee tiers, lowest volume first."""
    tiers = []
    upper = None
    for threshold, rate in FEE_TIERS:
        tiers.append(FeeTier(min_negotiations=threshold, max_negotiations=upper, rate=rate))
        upper = threshold - 1
    return FeeScheduleResponse(tiers=list(reversed(tiers)))


@router.get("/fees/quote", response_model=FeeQuoteResponse)
async def fee_quote(
    amount: float = Query(..., gt=0, description="Agreed price before fees"),
    negotiation_count: int = Query(0, ge=0, description="Prior negotiations initiated"),
):
    """Fee and net amount for a hypothetical agreed price."""
    if not math.isfinite(amount):
        raise ValidationException(
            "amount must be a finite number",
            field_errors=[{"field": "amount", "error": "must be a finite number"}]
        )

    fee = calculate_platform_fee(amount, negotiation_count)
    return FeeQuoteResponse(
        amount=amount,
        negotiation_count=negotiation_count,
        rate=fee_rate_for(negotiation_count),
        platform_fee=fee,
        net_amount=amount - fee,
    )
