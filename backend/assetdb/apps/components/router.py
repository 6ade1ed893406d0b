from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from assetdb.database import get_db
from assetdb.permissions import authorize
from assetdb.security import get_current_active_user, require_roles
from assetdb.apps.accounts import models as account_models
from assetdb.apps.accounts import services as account_services
from assetdb.apps.assets import services as asset_services
from assetdb.apps.audit import schemas as audit_schemas
from assetdb.apps.audit import services as audit_services

from . import models, schemas, services

router = APIRouter(
    prefix="/components",
    tags=["components"],
    dependencies=[Depends(get_current_active_user)],
)

HISTORY_ROLES = [
    account_models.AccountRole.ADMIN,
    account_models.AccountRole.ASSET_MANAGER,
]


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, account_services.AuthorisationError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, services.NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, services.ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": exc.message, "errors": exc.errors, "context": exc.context},
        )
    if isinstance(exc, services.ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, services.UnimplementedError):
        return HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _load(db: Session, component_id: int) -> models.Component:
    try:
        return services.get_component(db, component_id)
    except services.NotFoundError as e:
        raise _http_error(e)


def _read(db: Session, component: models.Component) -> schemas.ComponentRead:
    read = schemas.ComponentRead.model_validate(component)
    read.remaining = services.remaining_stock(db, component)
    return read


# ---------------------------------------------------------------------------
# Listing / CRUD
# ---------------------------------------------------------------------------


@router.get("", response_model=List[schemas.ComponentSummary])
def list_components(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None, max_length=255),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        authorize(current_user, "view", models.Component)
    except account_services.AuthorisationError as e:
        raise _http_error(e)
    return services.list_components(
        db,
        acting_user=current_user,
        search=search,
        skip=skip,
        limit=limit,
    )


@router.post(
    "",
    response_model=schemas.ComponentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_component(
    payload: schemas.ComponentCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        authorize(current_user, "create", models.Component)
        component = services.create_component(db, acting_user=current_user, payload=payload)
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
    db.commit()
    db.refresh(component)
    return _read(db, component)


@router.get("/{component_id}", response_model=schemas.ComponentRead)
def get_component(
    component_id: int,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "view", component)
    except account_services.AuthorisationError as e:
        raise _http_error(e)
    return _read(db, component)


@router.put("/{component_id}", response_model=schemas.ComponentRead)
def update_component(
    component_id: int,
    payload: schemas.ComponentUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "update", component)
        component = services.update_component(
            db,
            acting_user=current_user,
            component_id=component_id,
            payload=payload,
        )
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
    db.commit()
    db.refresh(component)
    return _read(db, component)


@router.delete("/{component_id}", response_model=schemas.MessageResponse)
def delete_component(
    component_id: int,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "delete", component)
        services.delete_component(db, acting_user=current_user, component_id=component_id)
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
    db.commit()
    return schemas.MessageResponse(message=services.MSG_DELETE_SUCCESS, id=component_id)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@router.get("/{component_id}/checkout", response_model=schemas.ComponentCheckoutForm)
def get_checkout_form(
    component_id: int,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "checkout", component)
    except account_services.AuthorisationError as e:
        raise _http_error(e)
    read = _read(db, component)
    assets = asset_services.list_assets_for_user(db, user=current_user)
    return schemas.ComponentCheckoutForm(
        component=read,
        remaining=read.remaining,
        assets=[schemas.AssetOption.model_validate(asset) for asset in assets],
    )


@router.post(
    "/{component_id}/checkout",
    response_model=schemas.ComponentAssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout_component(
    component_id: int,
    payload: schemas.ComponentCheckoutRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "checkout", component)
        assignment = services.checkout_component(
            db,
            component_id=component_id,
            asset_id=payload.asset_id,
            admin_user=current_user,
            assigned_qty=payload.assigned_qty,
            note=payload.note,
        )
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
    db.commit()
    db.refresh(assignment)
    return assignment


@router.get("/{component_id}/assets", response_model=schemas.ComponentCheckoutList)
def list_component_checkouts(
    component_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        authorize(current_user, "view", models.Component)
        rows, total = services.list_checkouts(
            db,
            component_id=component_id,
            acting_user=current_user,
            skip=skip,
            limit=limit,
        )
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
    return schemas.ComponentCheckoutList(
        total=total,
        rows=[
            schemas.ComponentCheckoutRow(
                id=assignment.id,
                component_id=assignment.component_id,
                asset_id=assignment.asset_id,
                user_id=assignment.user_id,
                assigned_qty=assignment.assigned_qty,
                created_at=assignment.created_at,
                asset_tag=asset.asset_tag,
                asset_name=asset.name,
                asset_serial=asset.serial,
            )
            for assignment, asset in rows
        ],
    )


@router.get("/{component_id}/history", response_model=List[audit_schemas.AuditEventRead])
def get_component_history(
    component_id: int,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*HISTORY_ROLES)),
):
    component = _load(db, component_id)
    try:
        authorize(current_user, "view", component)
    except account_services.AuthorisationError as e:
        raise _http_error(e)
    return audit_services.list_audit_events(
        db,
        entity_type=services.ENTITY_TYPE,
        entity_id=str(component.id),
    )


# ---------------------------------------------------------------------------
# Bulk (not implemented)
# ---------------------------------------------------------------------------


@router.post("/bulk-checkout", response_model=schemas.MessageResponse)
def bulk_checkout(
    payload: schemas.ComponentBulkRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        authorize(current_user, "checkout", models.Component)
        services.bulk_checkout(db, acting_user=current_user, payload=payload)
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)


@router.post("/bulk-save", response_model=schemas.MessageResponse)
def bulk_save(
    payload: schemas.ComponentBulkRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        authorize(current_user, "update", models.Component)
        services.bulk_save(db, acting_user=current_user, payload=payload)
    except (account_services.AuthorisationError, services.ComponentError) as e:
        raise _http_error(e)
