from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from . import models


def get_category(db: Session, category_id: Optional[int]) -> Optional[models.Category]:
    if category_id is None:
        return None
    return db.query(models.Category).filter(models.Category.id == category_id).first()


def get_location(db: Session, location_id: Optional[int]) -> Optional[models.Location]:
    if location_id is None:
        return None
    return db.query(models.Location).filter(models.Location.id == location_id).first()
