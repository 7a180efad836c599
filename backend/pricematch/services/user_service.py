"""
User records.

WHAT: Mirror identity-provider users into the users collection
WHY: Dashboards, admin stats and fee tiers need local user data
HOW: Create on first sight, re-key records whose email moved to a new id
"""

from ..capabilities.interfaces import Datastore
from ..models.domain import UserIdentity, UserRecord
from ..utils.exceptions import DuplicateRecordError
from ..utils.logger import get_logger

logger = get_logger(__name__)


def ensure_user(datastore: Datastore, identity: UserIdentity) -> UserRecord:
    """
    Return the stored user for an identity, creating it if needed.

    Email is unique in the users collection. When a stored user has the
    same email under a different id, that record is moved to the new id.
    """
    by_email = datastore.list("users", {"email": identity.email})
    if by_email:
        existing = by_email[0]
        changes = {}
        if existing["id"] != identity.id:
            logger.info(f"Re-keying user {existing['id']} -> {identity.id} ({identity.email})")
            changes["id"] = identity.id
            if identity.display_name:
                changes["display_name"] = identity.display_name
        if existing["role"] != identity.role:
            changes["role"] = identity.role
        if changes:
            existing = datastore.update("users", existing["id"], changes)
        return UserRecord.model_validate(existing)

    by_id = datastore.list("users", {"id": identity.id})
    if by_id:
        return UserRecord.model_validate(by_id[0])

    try:
        created = datastore.create("users", {
            "id": identity.id,
            "email": identity.email,
            "display_name": identity.display_name or identity.email.split("@")[0],
            "role": identity.role,
            "total_negotiations": 0,
        })
    except DuplicateRecordError:
        # Another request for the same user won the insert
        rows = datastore.list("users", {"id": identity.id})
        if not rows:
            raise
        created = rows[0]
    else:
        logger.info(f"Created user {identity.id} ({identity.email})")

    return UserRecord.model_validate(created)


def record_initiated_negotiation(datastore: Datastore, user: UserRecord) -> UserRecord:
    """Bump the user's negotiation counter."""
    updated = datastore.update("users", user.id, {"total_negotiations": user.total_negotiations + 1})
    return UserRecord.model_validate(updated)


def count_initiated_negotiations(datastore: Datastore, user_id: str) -> int:
    """Number of negotiations the user has initiated; drives the fee tier."""
    return len(datastore.list("negotiations", {"initiator_id": user_id}))
