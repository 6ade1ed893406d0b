from __future__ import annotations

import logging
import os
from typing import Optional, Union

from sqlalchemy.orm import Session

from . import models

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Mirrors the "full multiple companies support" admin setting. When off,
# every user may pick any company for the records they create.
FULL_MULTIPLE_COMPANIES_SUPPORT = os.getenv(
    "FULL_MULTIPLE_COMPANIES_SUPPORT", "true"
).lower() in {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class AuthorisationError(Exception):
    """Raised when a user tries to perform an action they are not authorised for."""


# ---------------------------------------------------------------------------
# Company scoping
# ---------------------------------------------------------------------------


def is_company_restricted(
    user: models.User,
    *,
    multi_company: Optional[bool] = None,
) -> bool:
    """
    True when the user is pinned to a single company.

    Superusers and users without a company are never restricted, and nobody
    is restricted while multi-company support is switched off.
    """
    if multi_company is None:
        multi_company = FULL_MULTIPLE_COMPANIES_SUPPORT
    if not multi_company:
        return False
    if getattr(user, "is_superuser", False):
        return False
    return user.company_id is not None


def resolve_company_id(
    acting_user: models.User,
    requested_id: Optional[str],
    *,
    multi_company: Optional[bool] = None,
) -> Optional[str]:
    """
    Company id to store on a record written by `acting_user`.

    A restricted user always gets their own company, whatever was requested.
    """
    if is_company_restricted(acting_user, multi_company=multi_company):
        if requested_id and requested_id != acting_user.company_id:
            logger.info(
                "Overriding requested company with acting user's company",
                extra={
                    "user_id": acting_user.id,
                    "requested_company_id": requested_id,
                    "company_id": acting_user.company_id,
                },
            )
        return acting_user.company_id
    return requested_id or None


def can_access_company(
    user: models.User,
    company_id: Optional[str],
    *,
    multi_company: Optional[bool] = None,
) -> bool:
    """
    Whether the user can see a record owned by `company_id`.

    Records without a company are visible to everyone.
    """
    if not is_company_restricted(user, multi_company=multi_company):
        return True
    if company_id is None:
        return True
    return company_id == user.company_id


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_user_by_id(
    db: Session,
    user_id: Union[str, int, None],
) -> Optional[models.User]:
    if user_id is None:
        return None
    return (
        db.query(models.User)
        .filter(models.User.id == str(user_id).strip())
        .first()
    )


def get_company(db: Session, company_id: Optional[str]) -> Optional[models.Company]:
    if not company_id:
        return None
    return db.query(models.Company).filter(models.Company.id == company_id).first()
