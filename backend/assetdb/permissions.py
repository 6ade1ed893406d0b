"""
Action-level permission checks.

Routers call `authorize(user, action, target)` before touching the
database for writes. `target` is either a model class (create / list) or
an instance (view / update / delete / checkout); instances are also checked
against the user's company scope.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet

from assetdb.apps.accounts import models as account_models
from assetdb.apps.accounts import services as account_services
from assetdb.apps.accounts.models import AccountRole

_MANAGERS = frozenset({AccountRole.ADMIN, AccountRole.ASSET_MANAGER})

# action -> roles allowed to perform it (SUPERUSER always passes)
ACTION_ROLES: Dict[str, FrozenSet[AccountRole]] = {
    "view": frozenset(AccountRole) - {AccountRole.SUPERUSER},
    "create": _MANAGERS,
    "update": _MANAGERS,
    "delete": _MANAGERS,
    "checkout": _MANAGERS | {AccountRole.TECHNICIAN},
}


def _target_label(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return f"{type(target).__name__}:{getattr(target, 'id', '?')}"


def authorize(user: account_models.User, action: str, target: Any) -> None:
    """
    Raise AuthorisationError unless `user` may perform `action` on `target`.
    """
    if action not in ACTION_ROLES:
        raise ValueError(f"Unknown action {action!r} passed to authorize()")

    if not getattr(user, "is_active", False):
        raise account_services.AuthorisationError("User account is not active.")

    if getattr(user, "is_superuser", False):
        return

    if user.role not in ACTION_ROLES[action]:
        raise account_services.AuthorisationError(
            f"Role {getattr(user.role, 'value', user.role)} may not {action} {_target_label(target)}."
        )

    if not isinstance(target, type):
        company_id = getattr(target, "company_id", None)
        if not account_services.can_access_company(user, company_id):
            raise account_services.AuthorisationError(
                f"{_target_label(target)} belongs to another company."
            )
