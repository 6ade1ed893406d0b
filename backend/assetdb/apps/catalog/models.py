from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)

from assetdb.database import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class CategoryTypeEnum(str, enum.Enum):
    ASSET = "asset"
    ACCESSORY = "accessory"
    CONSUMABLE = "consumable"
    COMPONENT = "component"
    LICENSE = "license"


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("name", "category_type", name="uq_categories_name_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category_type = Column(
        SAEnum(CategoryTypeEnum, name="category_type_enum", native_enum=False),
        nullable=False,
        default=CategoryTypeEnum.ASSET,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
