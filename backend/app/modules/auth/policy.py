"""
Complaint access policy.

Decides, for an authenticated caller, whether an action on complaints is
permitted and which fields the caller may write. Stateless and free of I/O:
every decision is a function of the caller and (for resource-scoped actions)
the complaint's owner and status.

    Action          Permitted when                      Writable fields
    CREATE          any authenticated caller            title, description, category
    READ_ALL        always (scope narrowed for users)   -
    READ_ONE        admin or owner                      -
    UPDATE_FIELDS   admin or owner                      title, description, category
                                                        (+ status for admin)
    UPDATE_STATUS   admin only                          status
    DELETE          admin or owner                      -

Denials raise ``AuthorizationError``. Resource existence must be checked by
the caller before asking for a resource-scoped decision.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from app.core.exceptions import AuthorizationError
from app.core.logging_config import logger
from app.models.account import AccountRole


class Action(str, Enum):
    CREATE = "create"
    READ_ONE = "read_one"
    READ_ALL = "read_all"
    UPDATE_FIELDS = "update_fields"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"


CONTENT_FIELDS: FrozenSet[str] = frozenset({"title", "description", "category"})
STATUS_FIELDS: FrozenSet[str] = frozenset({"status"})

RESOURCE_SCOPED: FrozenSet[Action] = frozenset(
    {Action.READ_ONE, Action.UPDATE_FIELDS, Action.DELETE}
)

DENIAL_MESSAGES: Dict[Action, str] = {
    Action.READ_ONE: "Not authorized to access this complaint",
    Action.UPDATE_FIELDS: "Not authorized to update this complaint",
    Action.UPDATE_STATUS: "Not authorized to update complaint status",
    Action.DELETE: "Not authorized to delete this complaint",
}


@dataclass(frozen=True)
class Caller:
    account_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN.value


@dataclass(frozen=True)
class Resource:
    owner_id: str
    status: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    """Outcome of an allowed action.

    Attributes:
        allowed_fields: Fields the caller may write (empty for reads/deletes).
        scope_owner_id: For READ_ALL, the owner the listing is restricted to;
            None means unrestricted.
    """

    allowed_fields: FrozenSet[str] = frozenset()
    scope_owner_id: Optional[str] = None


def _owns(caller: Caller, resource: Resource) -> bool:
    return str(resource.owner_id) == str(caller.account_id)


def authorize(caller: Caller, action: Action, resource: Optional[Resource] = None) -> Decision:
    """Return the decision for ``action`` or raise ``AuthorizationError``."""
    if action == Action.CREATE:
        return Decision(allowed_fields=CONTENT_FIELDS)

    if action == Action.READ_ALL:
        return Decision(scope_owner_id=None if caller.is_admin else caller.account_id)

    if action == Action.UPDATE_STATUS:
        if not caller.is_admin:
            raise AuthorizationError(DENIAL_MESSAGES[action])
        return Decision(allowed_fields=STATUS_FIELDS)

    if action in RESOURCE_SCOPED:
        if resource is None:
            raise ValueError(f"{action.value} requires a resource")
        if not (caller.is_admin or _owns(caller, resource)):
            raise AuthorizationError(DENIAL_MESSAGES[action])
        if action == Action.UPDATE_FIELDS:
            return Decision(allowed_fields=editable_fields(caller))
        return Decision()

    raise ValueError(f"Unknown action: {action}")


def editable_fields(caller: Caller) -> FrozenSet[str]:
    """Fields a caller may write through a general edit"""
    return CONTENT_FIELDS | STATUS_FIELDS if caller.is_admin else CONTENT_FIELDS


def list_scope(caller: Caller) -> Optional[str]:
    """Owner id a listing is restricted to, or None for the full set."""
    return authorize(caller, Action.READ_ALL).scope_owner_id


def filter_patch(caller: Caller, patch: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the fields the caller may write through a general edit.

    Edit forms resend every field, including ``status`` for regular users,
    so fields outside the allowed set are dropped rather than rejected.
    """
    allowed = editable_fields(caller)
    dropped = set(patch) - allowed
    if dropped:
        logger.info(
            f"[Policy] Dropped fields {sorted(dropped)} from edit by {caller.account_id}",
            extra={"event_type": "policy_filter", "dropped_fields": sorted(dropped)},
        )
    return {key: value for key, value in patch.items() if key in allowed}
