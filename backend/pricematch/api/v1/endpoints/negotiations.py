"""
Negotiation endpoints.

WHAT: Create, list and view negotiations; submit price ranges
WHY: HTTP surface of the blind negotiation flow
HOW: FastAPI router delegating to negotiation_service with injected platform/user
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from ....api.deps import get_current_user, platform_dependency
from ....capabilities.factory import Platform
from ....core.config import settings
from ....models.api_schemas import (
    CreateNegotiationRequest,
    SubmitPriceRangeRequest,
    NegotiationDetailsResponse,
    SubmitPriceRangeResponse,
    NegotiationSummary,
)
from ....models.domain import UserIdentity, NegotiationRecord, Role
from ....services.negotiation_service import (
    Attachment,
    create_negotiation,
    get_negotiation_details,
    list_user_negotiations,
    submit_price_range,
)
from ....utils.exceptions import AttachmentTooLargeException, ValidationException
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/negotiations", response_model=NegotiationRecord, status_code=status.HTTP_201_CREATED)
async def create_negotiation_endpoint(
    title: str = Form(...),
    counterpart_email: str = Form(...),
    initiator_role: Role = Form("buyer"),
    description: str = Form(""),
    item_link: str = Form(""),
    expiration_days: int = Form(settings.DEFAULT_EXPIRATION_DAYS),
    attachment: Optional[UploadFile] = File(None),
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """
    Create a negotiation.

    WHAT: Validate the form, store the optional attachment, create the record
    WHY: Entry point for the initiator
    HOW: Multipart form -> CreateNegotiationRequest -> negotiation_service
    """
    try:
        request = CreateNegotiationRequest(
            title=title,
            counterpart_email=counterpart_email,
            initiator_role=initiator_role,
            description=description,
            item_link=item_link,
            expiration_days=expiration_days,
        )
    except PydanticValidationError as e:
        field_errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]} for err in e.errors()
        ]
        raise ValidationException("Invalid negotiation details", field_errors=field_errors) from e

    upload = None
    if attachment is not None and attachment.filename:
        limit = settings.MAX_ATTACHMENT_BYTES
        # Read at most one byte past the limit
        content = await attachment.read(limit + 1)
        if len(content) > limit:
            size = attachment.size if attachment.size is not None else len(content)
            raise AttachmentTooLargeException(size, limit)
        upload = Attachment(filename=attachment.filename, content=content)

    return create_negotiation(platform, user, request, upload)


@router.get("/negotiations", response_model=List[NegotiationSummary])
async def list_negotiations(
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """Negotiations the caller initiated or joined, newest first."""
    records = list_user_negotiations(platform.datastore, user.id)
    return [NegotiationSummary.from_record(r) for r in records]


@router.get("/negotiations/{negotiation_id}", response_model=NegotiationDetailsResponse)
async def get_negotiation(
    negotiation_id: str,
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """
    Negotiation details for the caller.

    Visiting as the invited counterpart links the caller to the negotiation.
    """
    return get_negotiation_details(platform, user, negotiation_id)


@router.post("/negotiations/{negotiation_id}/price-range", response_model=SubmitPriceRangeResponse)
async def submit_range(
    negotiation_id: str,
    request: SubmitPriceRangeRequest,
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """
    Submit the caller's private price range.

    WHAT: Store the range and, on the second submission, evaluate the deal
    WHY: Both ranges are needed before any price is revealed
    HOW: negotiation_service.submit_price_range
    """
    response = submit_price_range(platform, user, negotiation_id, request)
    if response.evaluation.deal_found:
        logger.info(f"Deal available for negotiation {negotiation_id}")
    return response
