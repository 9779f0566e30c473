"""Role-based capability checks evaluated before any ledger mutation."""

from enum import Enum

from branchstock.config import get_logger
from branchstock.core.entities.actor import Actor, Role
from branchstock.core.exceptions import PermissionDeniedError

logger = get_logger(__name__)


class Capability(str, Enum):
    """Ledger and transfer actions gated by role and branch."""

    OPEN_LEDGER = "ledger:open"
    RECEIVE_STOCK = "ledger:receive"
    ISSUE_STOCK = "ledger:issue"

    REQUEST_TRANSFER = "transfer:request"
    RESOLVE_TRANSFER = "transfer:resolve"
    DELETE_TRANSFER = "transfer:delete"


# Capabilities a manager holds, limited to their assigned branch
MANAGER_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.OPEN_LEDGER,
        Capability.RECEIVE_STOCK,
        Capability.ISSUE_STOCK,
        Capability.REQUEST_TRANSFER,
        Capability.RESOLVE_TRANSFER,
    }
)


def has_capability(
    actor: Actor,
    capability: Capability,
    branch_id: str | None = None,
) -> bool:
    """Return True if ``actor`` may exercise ``capability`` on ``branch_id``."""
    if actor.role == Role.ADMIN:
        return True
    if capability not in MANAGER_CAPABILITIES:
        return False
    if actor.branch_id is None:
        return False
    return branch_id is None or branch_id == actor.branch_id


def ensure_capability(
    actor: Actor,
    capability: Capability,
    branch_id: str | None = None,
) -> None:
    """Raise PermissionDeniedError unless the actor holds the capability."""
    if not has_capability(actor, capability, branch_id):
        logger.warning(
            "permission_denied",
            role=actor.role.value,
            actor_branch=actor.branch_id,
            capability=capability.value,
            branch_id=branch_id,
        )
        raise PermissionDeniedError(actor.role.value, capability.value, branch_id)
