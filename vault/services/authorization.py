"""Capability checks gating every mutating operation on a record."""

from common.logging_config import get_logger
from vault.domain import FileRecord, User, effective_permissions
from vault.exceptions import UnauthorizedAccessError

logger = get_logger(__name__)

CAN_VIEW = "can_view"
CAN_EDIT = "can_edit"
CAN_DELETE = "can_delete"
CAN_SHARE = "can_share"


def require_capability(record: FileRecord, user: User, capability: str) -> None:
    """
    Raises:
        UnauthorizedAccessError: If ``user`` lacks ``capability`` on ``record``
    """
    if not effective_permissions(record, user).allows(capability):
        logger.warning(
            f"Denied {capability} on {record.id} [user_id={user.user_id if user else None}]"
        )
        raise UnauthorizedAccessError(
            f"User lacks {capability.replace('_', ' ')} permission on file {record.id}"
        )


def can_view(record: FileRecord, user: User) -> bool:
    return effective_permissions(record, user).can_view
