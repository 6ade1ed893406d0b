from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from assetdb.apps.accounts import models as account_models
from assetdb.apps.accounts import services as account_services
from . import models


def get_asset(db: Session, asset_id: Optional[int]) -> Optional[models.Asset]:
    if asset_id is None:
        return None
    return db.query(models.Asset).filter(models.Asset.id == asset_id).first()


def list_assets_for_user(
    db: Session,
    *,
    user: account_models.User,
    skip: int = 0,
    limit: int = 500,
) -> List[models.Asset]:
    """
    Assets the user may pick as a checkout target, ordered by tag.
    """
    query = db.query(models.Asset)
    if account_services.is_company_restricted(user):
        query = query.filter(
            (models.Asset.company_id == user.company_id)
            | (models.Asset.company_id.is_(None))
        )
    return query.order_by(models.Asset.asset_tag.asc()).offset(skip).limit(limit).all()
