from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from assetdb.apps.accounts import models as account_models
from assetdb.apps.accounts import services as account_services
from assetdb.apps.assets import models as asset_models
from assetdb.apps.assets import services as asset_services
from assetdb.apps.audit import services as audit_services
from assetdb.apps.catalog import models as catalog_models
from assetdb.apps.catalog import services as catalog_services
from . import models, schemas

logger = logging.getLogger(__name__)

ENTITY_TYPE = "Component"


# ---------------------------------------------------------------------------
# Message keys (resolved to user-facing text by the client)
# ---------------------------------------------------------------------------

MSG_NOT_FOUND = "components.not_found"
MSG_ASSET_NOT_FOUND = "components.asset_does_not_exist"
MSG_CREATE_SUCCESS = "components.create.success"
MSG_UPDATE_SUCCESS = "components.update.success"
MSG_DELETE_SUCCESS = "components.delete.success"
MSG_DELETE_ASSIGNED = "components.delete.assigned"
MSG_UPDATE_STOCK_CHANGED = "components.update.stock_changed"
MSG_CHECKOUT_SUCCESS = "components.checkout.success"
MSG_CHECKOUT_STOCK_CHANGED = "components.checkout.stock_changed"
MSG_SAVE_FAILED = "components.save.error"
MSG_BULK_UNIMPLEMENTED = "components.bulk.not_implemented"

ERR_REQUIRED = "validation.required"
ERR_EXISTS = "validation.exists"
ERR_CATEGORY_TYPE = "validation.category_type"
ERR_QTY_BELOW_ASSIGNED = "validation.qty_below_assigned"
ERR_BETWEEN = "validation.between"
ERR_CONSTRAINT = "validation.constraint"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ComponentError(Exception):
    """Base class for component store failures. `message` is a message key."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ComponentError):
    """Raised when a component (or the checkout target asset) does not exist."""


class ValidationError(ComponentError):
    """
    Raised when input violates a constraint. `errors` maps field name to a
    message key; `context` carries values the message needs (e.g. the
    checkout maximum).
    """

    def __init__(
        self,
        errors: Dict[str, str],
        *,
        context: Optional[Dict[str, Any]] = None,
        message: str = MSG_SAVE_FAILED,
    ) -> None:
        super().__init__(message)
        self.errors = errors
        self.context = context or {}


class ConflictError(ComponentError):
    """Raised when stock changed underneath a checkout or qty update, or delete is blocked."""


class UnimplementedError(ComponentError):
    """Raised by the bulk placeholders."""


# ---------------------------------------------------------------------------
# Stock accounting
# ---------------------------------------------------------------------------


def _allocated_quantity(db: Session, component_id: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(models.ComponentAssignment.assigned_qty), 0))
        .filter(models.ComponentAssignment.component_id == component_id)
        .scalar()
    )
    return int(total or 0)


def remaining_stock(db: Session, component: models.Component) -> int:
    """
    qty minus everything currently checked out, read from the database on
    every call. Never negative.
    """
    remaining = (component.qty or 0) - _allocated_quantity(db, component.id)
    return max(remaining, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _json_safe(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _snapshot(component: models.Component) -> dict:
    fields = schemas.ComponentFields.model_fields
    data = {name: _json_safe(getattr(component, name)) for name in fields}
    data["user_id"] = component.user_id
    return data


def _validate_references(
    db: Session,
    *,
    payload: schemas.ComponentFields,
    company_id: Optional[str],
) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not (payload.name or "").strip():
        errors["name"] = ERR_REQUIRED

    if payload.category_id is None:
        errors["category_id"] = ERR_REQUIRED
    else:
        category = catalog_services.get_category(db, payload.category_id)
        if category is None:
            errors["category_id"] = ERR_EXISTS
        elif category.category_type != catalog_models.CategoryTypeEnum.COMPONENT:
            errors["category_id"] = ERR_CATEGORY_TYPE

    if payload.location_id is not None and catalog_services.get_location(db, payload.location_id) is None:
        errors["location_id"] = ERR_EXISTS

    if company_id is not None and account_services.get_company(db, company_id) is None:
        errors["company_id"] = ERR_EXISTS

    return errors


def _apply_fields(
    component: models.Component,
    *,
    payload: schemas.ComponentFields,
    company_id: Optional[str],
) -> None:
    component.name = payload.name.strip()
    component.category_id = payload.category_id
    component.location_id = payload.location_id
    component.company_id = company_id
    component.order_number = payload.order_number
    component.min_amt = payload.min_amt
    component.serial = payload.serial
    component.purchase_date = payload.purchase_date
    component.purchase_cost = payload.purchase_cost
    component.qty = payload.qty


def _flush_or_raise(db: Session, *, action: str, component_id: Optional[int]) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "Component write rejected by database constraint",
            extra={"action": action, "component_id": component_id, "error": str(exc.orig)},
        )
        raise ValidationError({"__all__": ERR_CONSTRAINT}) from exc


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------


def get_component(db: Session, component_id: int) -> models.Component:
    component = (
        db.query(models.Component)
        .filter(models.Component.id == component_id)
        .first()
    )
    if component is None:
        raise NotFoundError(MSG_NOT_FOUND)
    return component


def _lock_component(db: Session, component_id: int) -> models.Component:
    """
    get_component for writers that depend on the allocated total: the row is
    held with SELECT ... FOR UPDATE (where the backend supports it) and
    reloaded from the database.
    """
    component = (
        db.query(models.Component)
        .filter(models.Component.id == component_id)
        .with_for_update(of=models.Component)
        .populate_existing()
        .first()
    )
    if component is None:
        raise NotFoundError(MSG_NOT_FOUND)
    return component


def list_components(
    db: Session,
    *,
    acting_user: account_models.User,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[schemas.ComponentSummary]:
    allocated = (
        db.query(
            models.ComponentAssignment.component_id.label("component_id"),
            func.sum(models.ComponentAssignment.assigned_qty).label("allocated"),
        )
        .group_by(models.ComponentAssignment.component_id)
        .subquery()
    )
    query = (
        db.query(models.Component, func.coalesce(allocated.c.allocated, 0))
        .outerjoin(allocated, allocated.c.component_id == models.Component.id)
    )
    if account_services.is_company_restricted(acting_user):
        query = query.filter(
            or_(
                models.Component.company_id == acting_user.company_id,
                models.Component.company_id.is_(None),
            )
        )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                models.Component.name.ilike(pattern),
                models.Component.serial.ilike(pattern),
                models.Component.order_number.ilike(pattern),
            )
        )

    rows = query.order_by(models.Component.name.asc(), models.Component.id.asc()).offset(skip).limit(limit).all()

    summaries: List[schemas.ComponentSummary] = []
    for component, allocated_qty in rows:
        remaining = max((component.qty or 0) - int(allocated_qty or 0), 0)
        summaries.append(
            schemas.ComponentSummary(
                id=component.id,
                name=component.name,
                category_id=component.category_id,
                category_name=component.category.name if component.category else None,
                location_id=component.location_id,
                location_name=component.location.name if component.location else None,
                company_id=component.company_id,
                serial=component.serial,
                order_number=component.order_number,
                purchase_date=component.purchase_date,
                purchase_cost=component.purchase_cost,
                qty=component.qty,
                remaining=remaining,
                min_amt=component.min_amt,
                below_min=component.min_amt is not None and remaining < component.min_amt,
            )
        )
    return summaries


def create_component(
    db: Session,
    *,
    acting_user: account_models.User,
    payload: schemas.ComponentCreate,
) -> models.Component:
    company_id = account_services.resolve_company_id(acting_user, payload.company_id)
    errors = _validate_references(db, payload=payload, company_id=company_id)
    if errors:
        raise ValidationError(errors)

    component = models.Component(user_id=acting_user.id)
    _apply_fields(component, payload=payload, company_id=company_id)
    db.add(component)
    _flush_or_raise(db, action="create", component_id=None)

    audit_services.log_event(
        db,
        company_id=component.company_id,
        actor_user_id=acting_user.id,
        entity_type=ENTITY_TYPE,
        entity_id=str(component.id),
        action="create",
        after=_snapshot(component),
    )
    return component


def update_component(
    db: Session,
    *,
    acting_user: account_models.User,
    component_id: int,
    payload: schemas.ComponentUpdate,
) -> models.Component:
    """
    Replace every editable field with the payload. user_id is left alone.

    qty may not drop below the checked-out total. The row is locked before
    the total is read, and the total is read again after the flush so a
    checkout committed in between still rolls the update back.
    """
    component = _lock_component(db, component_id)
    company_id = account_services.resolve_company_id(acting_user, payload.company_id)

    errors = _validate_references(db, payload=payload, company_id=company_id)
    assigned = _allocated_quantity(db, component.id)
    if payload.qty < assigned:
        errors["qty"] = ERR_QTY_BELOW_ASSIGNED
    if errors:
        raise ValidationError(errors, context={"assigned": assigned})

    before = _snapshot(component)
    _apply_fields(component, payload=payload, company_id=company_id)
    _flush_or_raise(db, action="update", component_id=component.id)

    allocated = _allocated_quantity(db, component.id)
    if allocated > component.qty:
        db.rollback()
        logger.warning(
            "Component qty update lost to a concurrent checkout",
            extra={"component_id": component_id, "qty": payload.qty, "allocated": allocated},
        )
        raise ConflictError(MSG_UPDATE_STOCK_CHANGED)

    audit_services.log_event(
        db,
        company_id=component.company_id,
        actor_user_id=acting_user.id,
        entity_type=ENTITY_TYPE,
        entity_id=str(component.id),
        action="update",
        before=before,
        after=_snapshot(component),
    )
    return component


def delete_component(
    db: Session,
    *,
    acting_user: account_models.User,
    component_id: int,
) -> None:
    """
    Delete a component. Refused while any quantity is checked out so that
    assignment rows are never orphaned.
    """
    component = _lock_component(db, component_id)
    assigned = _allocated_quantity(db, component.id)
    if assigned > 0:
        raise ConflictError(MSG_DELETE_ASSIGNED)

    before = _snapshot(component)
    company_id = component.company_id
    db.delete(component)
    try:
        db.flush()
    except IntegrityError as exc:
        # components_assets.component_id is ON DELETE RESTRICT.
        db.rollback()
        logger.warning(
            "Component delete blocked by a concurrent checkout",
            extra={"component_id": component_id, "error": str(exc.orig)},
        )
        raise ConflictError(MSG_DELETE_ASSIGNED) from exc

    audit_services.log_event(
        db,
        company_id=company_id,
        actor_user_id=acting_user.id,
        entity_type=ENTITY_TYPE,
        entity_id=str(component_id),
        action="delete",
        before=before,
    )


def checkout_component(
    db: Session,
    *,
    component_id: int,
    asset_id: int,
    admin_user: account_models.User,
    assigned_qty: int,
    note: Optional[str] = None,
) -> models.ComponentAssignment:
    """
    Check `assigned_qty` units of a component out to an asset.

    The component row is locked (SELECT ... FOR UPDATE where the backend
    supports it) before stock is read, and the allocated total is read
    again after the insert. If another transaction got in first the whole
    unit of work is rolled back and ConflictError is raised.
    """
    component = _lock_component(db, component_id)

    remaining = remaining_stock(db, component)
    if isinstance(assigned_qty, bool) or not isinstance(assigned_qty, int) or not 1 <= assigned_qty <= remaining:
        logger.warning(
            "Checkout quantity out of range",
            extra={
                "component_id": component.id,
                "assigned_qty": assigned_qty,
                "remaining": remaining,
            },
        )
        raise ValidationError(
            {"assigned_qty": ERR_BETWEEN},
            context={"min": 1, "max": remaining},
        )

    asset = asset_services.get_asset(db, asset_id)
    if asset is None or not account_services.can_access_company(admin_user, asset.company_id):
        raise NotFoundError(MSG_ASSET_NOT_FOUND)

    assignment = models.ComponentAssignment(
        component_id=component.id,
        asset_id=asset.id,
        user_id=admin_user.id,
        assigned_qty=assigned_qty,
    )
    db.add(assignment)
    db.flush()

    allocated = _allocated_quantity(db, component.id)
    if allocated > component.qty:
        db.rollback()
        logger.warning(
            "Concurrent checkout exhausted stock",
            extra={
                "component_id": component_id,
                "asset_id": asset_id,
                "assigned_qty": assigned_qty,
                "allocated": allocated,
            },
        )
        raise ConflictError(MSG_CHECKOUT_STOCK_CHANGED)

    audit_services.log_event(
        db,
        company_id=component.company_id,
        actor_user_id=admin_user.id,
        entity_type=ENTITY_TYPE,
        entity_id=str(component.id),
        action="checkout",
        target_type="Asset",
        target_id=str(asset.id),
        note=note,
        after={"assigned_qty": assigned_qty, "remaining": component.qty - allocated},
        critical=True,
    )
    logger.info(
        "Component checked out",
        extra={
            "component_id": component.id,
            "asset_id": asset.id,
            "assigned_qty": assigned_qty,
            "admin_user_id": admin_user.id,
        },
    )
    return assignment


def list_checkouts(
    db: Session,
    *,
    component_id: int,
    acting_user: account_models.User,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Tuple[models.ComponentAssignment, asset_models.Asset]], int]:
    """
    Current checkouts of a component with their assets, newest first, plus
    the total number of checkout rows. Users outside the component's
    company get an empty result.
    """
    component = get_component(db, component_id)
    if not account_services.can_access_company(acting_user, component.company_id):
        return [], 0

    query = (
        db.query(models.ComponentAssignment, asset_models.Asset)
        .join(asset_models.Asset, asset_models.Asset.id == models.ComponentAssignment.asset_id)
        .filter(models.ComponentAssignment.component_id == component.id)
    )
    total = query.count()
    rows = (
        query.order_by(models.ComponentAssignment.created_at.desc(), models.ComponentAssignment.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return [(assignment, asset) for assignment, asset in rows], total


# ---------------------------------------------------------------------------
# Bulk placeholders
# ---------------------------------------------------------------------------


def bulk_checkout(db: Session, *, acting_user: account_models.User, payload: schemas.ComponentBulkRequest) -> None:
    raise UnimplementedError(MSG_BULK_UNIMPLEMENTED)


def bulk_save(db: Session, *, acting_user: account_models.User, payload: schemas.ComponentBulkRequest) -> None:
    raise UnimplementedError(MSG_BULK_UNIMPLEMENTED)
