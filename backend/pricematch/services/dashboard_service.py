"""
Dashboard and admin statistics.

WHAT: Aggregate negotiations and deals for a user or the whole platform
WHY: Power the user dashboard and the admin overview
HOW: List collections through the datastore and reduce in memory
"""

from ..capabilities.interfaces import Datastore
from ..models.api_schemas import (
    AdminStatsResponse, DashboardResponse, DashboardStats, NegotiationSummary
)
from ..models.domain import DealRecord, DealStatus, NegotiationRecord, NegotiationStatus
from .negotiation_service import list_user_negotiations
from ..utils.logger import get_logger

logger = get_logger(__name__)


def list_user_deals(datastore: Datastore, user_id: str) -> list[DealRecord]:
    """Deals where the user is buyer or seller, newest first."""
    as_buyer = datastore.list("deals", {"buyer_id": user_id})
    as_seller = datastore.list("deals", {"seller_id": user_id})

    unique = {row["id"]: row for row in as_buyer + as_seller}
    deals = [DealRecord.model_validate(row) for row in unique.values()]
    return sorted(deals, key=lambda d: d.created_at, reverse=True)


def build_user_dashboard(datastore: Datastore, user_id: str) -> DashboardResponse:
    """
    Stats and lists for one user's dashboard.

    Completed counts deals that were executed, not merely found.
    """
    negotiations = list_user_negotiations(datastore, user_id)
    deals = list_user_deals(datastore, user_id)

    stats = DashboardStats(
        total=len(negotiations),
        active=sum(1 for n in negotiations if n.status == NegotiationStatus.ACTIVE),
        completed=sum(1 for d in deals if d.status == DealStatus.EXECUTED),
        total_value=sum(d.final_price for d in deals),
    )
    return DashboardResponse(
        stats=stats,
        negotiations=[NegotiationSummary.from_record(n) for n in negotiations],
        deals=deals,
    )


def build_admin_stats(datastore: Datastore) -> AdminStatsResponse:
    """
    Platform-wide statistics.

    Ratios are zero when their denominator is zero.
    """
    users = datastore.list("users")
    negotiations = [NegotiationRecord.model_validate(row) for row in datastore.list("negotiations")]
    deals = [DealRecord.model_validate(row) for row in datastore.list("deals")]

    total_users = len(users)
    total_negotiations = len(negotiations)
    active = sum(
        1 for n in negotiations
        if n.status in (NegotiationStatus.ACTIVE, NegotiationStatus.PENDING)
    )
    completed = sum(1 for d in deals if d.status == DealStatus.EXECUTED)
    revenue = sum(d.platform_fee for d in deals)

    stats = AdminStatsResponse(
        total_users=total_users,
        total_negotiations=total_negotiations,
        active_negotiations=active,
        completed_deals=completed,
        total_revenue=revenue,
        average_deal_value=sum(d.final_price for d in deals) / len(deals) if deals else 0.0,
        conversion_rate=completed / total_negotiations * 100 if total_negotiations else 0.0,
        revenue_per_user=revenue / total_users if total_users else 0.0,
        revenue_per_deal=revenue / completed if completed else 0.0,
        negotiations_per_user=total_negotiations / total_users if total_users else 0.0,
    )
    logger.info(
        f"Admin stats: {total_users} users, {total_negotiations} negotiations, "
        f"{len(deals)} deals, revenue ${revenue:.2f}"
    )
    return stats
