from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ComponentFields(BaseModel):
    """
    Full field set of a component. Updates resend every field; anything
    left out is stored as empty.
    """

    name: str = Field(..., min_length=1, max_length=255)
    category_id: int
    location_id: Optional[int] = None
    company_id: Optional[str] = None
    order_number: Optional[str] = Field(default=None, max_length=255)
    min_amt: Optional[int] = Field(default=None, ge=0)
    serial: Optional[str] = Field(default=None, max_length=255)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    qty: int = Field(..., ge=0)


class ComponentCreate(ComponentFields):
    pass


class ComponentUpdate(ComponentFields):
    pass


class ComponentRead(ComponentFields):
    id: int
    user_id: Optional[str] = None
    remaining: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComponentSummary(BaseModel):
    id: int
    name: str
    category_id: int
    category_name: Optional[str] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    company_id: Optional[str] = None
    serial: Optional[str] = None
    order_number: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = None
    qty: int
    remaining: int
    min_amt: Optional[int] = None
    below_min: bool = False


class ComponentCheckoutRequest(BaseModel):
    asset_id: int
    # Range is checked against live stock in the service.
    assigned_qty: int
    note: Optional[str] = Field(default=None, max_length=1024)


class ComponentAssignmentRead(BaseModel):
    id: int
    component_id: int
    asset_id: int
    user_id: Optional[str] = None
    assigned_qty: int
    created_at: datetime

    class Config:
        from_attributes = True


class ComponentCheckoutRow(ComponentAssignmentRead):
    asset_tag: str
    asset_name: Optional[str] = None
    asset_serial: Optional[str] = None


class ComponentCheckoutList(BaseModel):
    total: int
    rows: List[ComponentCheckoutRow]


class AssetOption(BaseModel):
    id: int
    asset_tag: str
    name: Optional[str] = None

    class Config:
        from_attributes = True


class ComponentCheckoutForm(BaseModel):
    component: ComponentRead
    remaining: int
    assets: List[AssetOption]


class ComponentBulkRequest(BaseModel):
    component_ids: List[int] = Field(default_factory=list)
    asset_id: Optional[int] = None


class MessageResponse(BaseModel):
    message: str
    id: Optional[int] = None
