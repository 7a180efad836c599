"""
Participant role resolution.

WHAT: Work out which side of a negotiation a user is on
WHY: Users never pick their role when joining; it follows from the initiator's
HOW: Initiator keeps the role they chose, anyone else gets the opposite one
"""

from ..models.domain import Role

_OPPOSITE_ROLE = {"buyer": "seller", "seller": "buyer"}


def opposite_role(role: Role) -> Role:
    """Return the other side of a two-party negotiation."""
    try:
        return _OPPOSITE_ROLE[role]
    except KeyError:
        raise ValueError(f"Unknown role: {role}") from None


def resolve_participant_role(initiator_id: str, initiator_role: Role, current_user_id: str) -> Role:
    """
    Resolve the current user's role in a negotiation.

    Args:
        initiator_id: User who created the negotiation
        initiator_role: Role the initiator chose (buyer or seller)
        current_user_id: User whose role is being resolved

    Returns:
        "buyer" or "seller"
    """
    if initiator_id == current_user_id:
        if initiator_role not in _OPPOSITE_ROLE:
            raise ValueError(f"Unknown role: {initiator_role}")
        return initiator_role
    return opposite_role(initiator_role)
