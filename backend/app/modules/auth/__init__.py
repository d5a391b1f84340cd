# Authentication and authorization module

from app.modules.auth.dependencies import (
    get_session_claims,
    get_caller,
    get_current_account,
    require_action,
)

from app.modules.auth.policy import (
    Action,
    Caller,
    Resource,
    Decision,
    authorize,
    list_scope,
    filter_patch,
)

__all__ = [
    # Request dependencies
    "get_session_claims",
    "get_caller",
    "get_current_account",
    "require_action",
    # Policy
    "Action",
    "Caller",
    "Resource",
    "Decision",
    "authorize",
    "list_scope",
    "filter_patch",
]
