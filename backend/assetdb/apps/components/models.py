from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from assetdb.database import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class Component(Base):
    """
    Bulk-quantity inventory item (RAM, cables, drives) that is checked out
    to assets in portions. `qty` is the total owned; what is left is derived
    from the assignment rows, never stored.
    """

    __tablename__ = "components"
    __table_args__ = (
        CheckConstraint("qty >= 0", name="ck_components_qty_nonneg"),
        CheckConstraint("min_amt IS NULL OR min_amt >= 0", name="ck_components_min_amt_nonneg"),
        CheckConstraint("purchase_cost IS NULL OR purchase_cost >= 0", name="ck_components_cost_nonneg"),
        Index("ix_components_company_name", "company_id", "name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)

    order_number = Column(String(255), nullable=True)
    min_amt = Column(Integer, nullable=True)
    serial = Column(String(255), nullable=True, index=True)
    purchase_date = Column(Date, nullable=True)
    purchase_cost = Column(Numeric(12, 2), nullable=True)
    qty = Column(Integer, nullable=False, default=1)

    # Creator; written once on create.
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("Category", lazy="joined")
    location = relationship("Location", lazy="joined")
    company = relationship("Company", lazy="joined")
    assignments = relationship(
        "ComponentAssignment",
        back_populates="component",
        lazy="selectin",
        order_by="ComponentAssignment.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Component id={self.id} name={self.name!r} qty={self.qty}>"


class ComponentAssignment(Base):
    """
    One checkout of `assigned_qty` units of a component to an asset.
    """

    __tablename__ = "components_assets"
    __table_args__ = (
        CheckConstraint("assigned_qty >= 1", name="ck_components_assets_qty_positive"),
        Index("ix_components_assets_component", "component_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # RESTRICT: a component with live assignments cannot be deleted.
    component_id = Column(Integer, ForeignKey("components.id", ondelete="RESTRICT"), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_qty = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    component = relationship("Component", back_populates="assignments")
    asset = relationship("Asset", lazy="joined")
