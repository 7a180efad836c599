"""
Negotiation workflow.

WHAT: Create negotiations, show them to participants, accept price ranges
WHY: Orchestrates the datastore, blob store and outcome evaluator
HOW: Plain functions over an injected Platform; the evaluator runs at most
     once per negotiation, when the second range lands
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..capabilities.factory import Platform
from ..capabilities.interfaces import Datastore
from ..core.config import settings
from ..models.api_schemas import (
    CreateNegotiationRequest,
    SubmitPriceRangeRequest,
    NegotiationDetailsResponse,
    SubmitPriceRangeResponse,
    EvaluationSummary,
)
from ..models.domain import (
    UserIdentity, NegotiationRecord, NegotiationStatus, PriceRangeRecord, DealRecord
)
from .outcome_evaluator import evaluate_outcome
from .participants import resolve_participant_role
from .user_service import ensure_user, record_initiated_negotiation, count_initiated_negotiations
from .notification_service import notify
from ..utils.exceptions import (
    AttachmentTooLargeException,
    DuplicateRecordError,
    NegotiationNotFoundException,
    NegotiationNotPendingException,
    NotParticipantException,
    PriceRangeAlreadySubmittedException,
    ValidationException,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class Attachment:
    """Uploaded file contents."""
    filename: str
    content: bytes


def _safe_segment(value: str) -> str:
    cleaned = _UNSAFE_PATH_CHARS.sub("_", value.rsplit("/", 1)[-1].rsplit("\\", 1)[-1]).strip("._")
    return cleaned or "file"


def create_negotiation(
    platform: Platform,
    user: UserIdentity,
    request: CreateNegotiationRequest,
    attachment: Optional[Attachment] = None,
    *,
    now: Optional[datetime] = None
) -> NegotiationRecord:
    """
    Create a pending negotiation initiated by the user.

    WHAT: Upload the attachment, store the negotiation, bump the user's volume
    WHY: Entry point of the blind negotiation flow
    HOW: Attachment goes to negotiations/{user}/{ms}-{name}; expiry = now + days
    """
    now = now or datetime.utcnow()
    datastore = platform.datastore
    initiator = ensure_user(datastore, user)

    if request.counterpart_email.lower() == user.email.lower():
        raise ValidationException(
            "You cannot negotiate with yourself",
            field_errors=[{"field": "counterpart_email", "error": "must differ from your own email"}]
        )

    attachment_url = ""
    if attachment is not None:
        size = len(attachment.content)
        if size > settings.MAX_ATTACHMENT_BYTES:
            raise AttachmentTooLargeException(size, settings.MAX_ATTACHMENT_BYTES)
        path = (
            f"negotiations/{_safe_segment(user.id)}/"
            f"{int(now.timestamp() * 1000)}-{_safe_segment(attachment.filename)}"
        )
        attachment_url = platform.blobs.upload(attachment.content, path, upsert=True)

    row = datastore.create("negotiations", {
        "title": request.title,
        "description": request.description,
        "item_link": request.item_link,
        "attachment_url": attachment_url,
        "initiator_id": user.id,
        "initiator_role": request.initiator_role,
        "counterpart_email": request.counterpart_email,
        "status": NegotiationStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
        "expires_at": now + timedelta(days=request.expiration_days),
    })
    record_initiated_negotiation(datastore, initiator)

    negotiation = NegotiationRecord.model_validate(row)
    logger.info(
        f"Negotiation {negotiation.id} created by {user.id} as {negotiation.initiator_role}, "
        f"counterpart {negotiation.counterpart_email}"
    )
    return negotiation


def load_negotiation(datastore: Datastore, negotiation_id: str) -> NegotiationRecord:
    rows = datastore.list("negotiations", {"id": negotiation_id})
    if not rows:
        raise NegotiationNotFoundException(negotiation_id)
    return NegotiationRecord.model_validate(rows[0])


def link_counterpart(datastore: Datastore, negotiation: NegotiationRecord, user: UserIdentity) -> NegotiationRecord:
    """
    Attach the invited user to the negotiation on first visit.

    The initiator is notified; a failed notification does not undo the link.
    """
    if negotiation.counterpart_id or user.id == negotiation.initiator_id:
        return negotiation
    if negotiation.counterpart_email.lower() != user.email.lower():
        return negotiation

    row = datastore.update("negotiations", negotiation.id, {"counterpart_id": user.id})
    logger.info(f"User {user.id} joined negotiation {negotiation.id} as counterpart")

    notify(
        datastore,
        user_id=negotiation.initiator_id,
        negotiation_id=negotiation.id,
        type="counterpart_joined",
        title="Counterpart Joined",
        message=f"{user.display_name or user.email} has joined the negotiation: {negotiation.title}",
    )
    return NegotiationRecord.model_validate(row)


def _load_ranges(datastore: Datastore, negotiation_id: str) -> list[PriceRangeRecord]:
    rows = datastore.list("price_ranges", {"negotiation_id": negotiation_id}, order_by="submitted_at")
    return [PriceRangeRecord.model_validate(row) for row in rows]


def _load_deal(datastore: Datastore, negotiation_id: str) -> Optional[DealRecord]:
    rows = datastore.list("deals", {"negotiation_id": negotiation_id})
    return DealRecord.model_validate(rows[0]) if rows else None


def get_negotiation_details(platform: Platform, user: UserIdentity, negotiation_id: str) -> NegotiationDetailsResponse:
    """
    Negotiation as seen by one viewer.

    Only the viewer's own range is returned; for the counterpart only
    whether they have submitted.
    """
    datastore = platform.datastore
    ensure_user(datastore, user)
    negotiation = link_counterpart(datastore, load_negotiation(datastore, negotiation_id), user)

    is_participant = negotiation.is_participant(user.id)
    if not is_participant and not user.is_admin:
        raise NotParticipantException(negotiation_id, user.id)

    ranges = _load_ranges(datastore, negotiation_id)
    deal = _load_deal(datastore, negotiation_id)
    own_range = next((r for r in ranges if r.user_id == user.id), None)

    if deal is not None:
        progress = "deal_created"
    elif len(ranges) == 2:
        progress = "no_deal_possible"
    else:
        progress = "awaiting_ranges"

    return NegotiationDetailsResponse(
        negotiation=negotiation,
        your_role=(
            resolve_participant_role(negotiation.initiator_id, negotiation.initiator_role, user.id)
            if is_participant else None
        ),
        your_range=own_range,
        you_submitted=own_range is not None,
        counterpart_submitted=any(r.user_id != user.id for r in ranges),
        deal=deal,
        progress=progress,
    )


def submit_price_range(
    platform: Platform,
    user: UserIdentity,
    negotiation_id: str,
    request: SubmitPriceRangeRequest,
    *,
    now: Optional[datetime] = None
) -> SubmitPriceRangeResponse:
    """
    Store the user's range and evaluate once both sides are in.

    WHAT: Persist one range per participant, then attempt the match
    WHY: The second submission is what triggers deal creation
    HOW: Role from the initiator's choice; unique constraints keep ranges
         and deals at one per participant / negotiation
    """
    now = now or datetime.utcnow()
    datastore = platform.datastore
    ensure_user(datastore, user)
    negotiation = link_counterpart(datastore, load_negotiation(datastore, negotiation_id), user)

    if not negotiation.is_participant(user.id):
        raise NotParticipantException(negotiation_id, user.id)
    if negotiation.status != NegotiationStatus.PENDING:
        raise NegotiationNotPendingException(negotiation_id, negotiation.status.value)

    existing = datastore.list("price_ranges", {"negotiation_id": negotiation_id, "user_id": user.id})
    if existing:
        raise PriceRangeAlreadySubmittedException(negotiation_id, user.id)

    role = resolve_participant_role(negotiation.initiator_id, negotiation.initiator_role, user.id)
    try:
        row = datastore.create("price_ranges", {
            "negotiation_id": negotiation_id,
            "user_id": user.id,
            "user_role": role,
            "min_price": request.min_price,
            "max_price": request.max_price,
            "submitted_at": now,
        })
    except DuplicateRecordError as e:
        raise PriceRangeAlreadySubmittedException(negotiation_id, user.id) from e

    price_range = PriceRangeRecord.model_validate(row)
    logger.info(f"Price range submitted for {negotiation_id} by {user.id} ({role})")

    evaluation = evaluate_if_ready(datastore, negotiation, requester_id=user.id, now=now)
    return SubmitPriceRangeResponse(price_range=price_range, evaluation=evaluation)


def evaluate_if_ready(
    datastore: Datastore,
    negotiation: NegotiationRecord,
    requester_id: str,
    *,
    now: Optional[datetime] = None
) -> EvaluationSummary:
    """
    Run the outcome evaluator if the negotiation has exactly one range per role.

    The fee tier comes from the negotiations initiated by the requester,
    i.e. whoever submitted the second range.
    """
    ranges = _load_ranges(datastore, negotiation.id)
    if len(ranges) != 2:
        return EvaluationSummary()

    buyer_range = next((r for r in ranges if r.user_role == "buyer"), None)
    seller_range = next((r for r in ranges if r.user_role == "seller"), None)
    if buyer_range is None or seller_range is None:
        logger.warning(f"Negotiation {negotiation.id} has two ranges but not one per role")
        return EvaluationSummary()

    existing_deal = _load_deal(datastore, negotiation.id)
    if existing_deal is not None:
        return EvaluationSummary(deal_found=True, deal=existing_deal)

    outcome = evaluate_outcome(
        buyer_range,
        seller_range,
        count_initiated_negotiations(datastore, requester_id),
        now=now,
        split=settings.AGREED_PRICE_SPLIT,
        validity=timedelta(days=settings.DEAL_VALIDITY_DAYS),
    )
    if not outcome.deal_found:
        return EvaluationSummary(evaluated=True, reason=outcome.reason.value)

    try:
        deal_row = datastore.create("deals", outcome.deal.to_record())
    except DuplicateRecordError:
        logger.warning(f"Deal for {negotiation.id} already created by a concurrent evaluation")
        return EvaluationSummary(deal_found=True, deal=_load_deal(datastore, negotiation.id))

    deal = DealRecord.model_validate(deal_row)
    datastore.update("negotiations", negotiation.id, {"status": NegotiationStatus.COMPLETED.value})

    for participant_id in (deal.buyer_id, deal.seller_id):
        notify(
            datastore,
            user_id=participant_id,
            negotiation_id=negotiation.id,
            type="deal_found",
            title="Deal found!",
            message=f"A mutually beneficial price of ${deal.final_price:.2f} has been agreed upon for {negotiation.title}",
        )

    return EvaluationSummary(evaluated=True, deal_found=True, deal=deal)


def list_user_negotiations(datastore: Datastore, user_id: str) -> list[NegotiationRecord]:
    """Negotiations the user initiated or joined, newest first."""
    initiated = datastore.list("negotiations", {"initiator_id": user_id})
    joined = datastore.list("negotiations", {"counterpart_id": user_id})

    unique = {row["id"]: row for row in initiated + joined}
    records = [NegotiationRecord.model_validate(row) for row in unique.values()]
    return sorted(records, key=lambda n: n.created_at, reverse=True)
