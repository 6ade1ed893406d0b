from __future__ import annotations

from types import SimpleNamespace

import pytest

from assetdb.apps.accounts import models as account_models
from assetdb.apps.assets import models as asset_models
from assetdb.apps.catalog import models as catalog_models


def create_user(
    db,
    *,
    email: str,
    company_id=None,
    role=account_models.AccountRole.ASSET_MANAGER,
    is_superuser: bool = False,
) -> account_models.User:
    user = account_models.User(
        company_id=company_id,
        email=email,
        full_name=email.split("@")[0].title(),
        hashed_password="hash",
        role=role,
        is_active=True,
        is_superuser=is_superuser,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_inventory(db) -> SimpleNamespace:
    company_a = account_models.Company(name="Company A")
    company_b = account_models.Company(name="Company B")
    db.add_all([company_a, company_b])
    db.commit()

    category = catalog_models.Category(name="RAM", category_type=catalog_models.CategoryTypeEnum.COMPONENT)
    asset_category = catalog_models.Category(name="Laptops", category_type=catalog_models.CategoryTypeEnum.ASSET)
    location = catalog_models.Location(name="Main Store", company_id=company_a.id)
    asset_a = asset_models.Asset(asset_tag="A-0001", name="Laptop A", serial="SN-A1", company_id=company_a.id)
    asset_b = asset_models.Asset(asset_tag="B-0001", name="Laptop B", serial="SN-B1", company_id=company_b.id)
    db.add_all([category, asset_category, location, asset_a, asset_b])
    db.commit()

    manager_a = create_user(db, email="manager.a@example.com", company_id=company_a.id)
    manager_b = create_user(db, email="manager.b@example.com", company_id=company_b.id)
    viewer_a = create_user(
        db,
        email="viewer.a@example.com",
        company_id=company_a.id,
        role=account_models.AccountRole.VIEW_ONLY,
    )
    superuser = create_user(
        db,
        email="root@example.com",
        role=account_models.AccountRole.SUPERUSER,
        is_superuser=True,
    )

    return SimpleNamespace(
        company_a=company_a,
        company_b=company_b,
        category=category,
        asset_category=asset_category,
        location=location,
        asset_a=asset_a,
        asset_b=asset_b,
        manager_a=manager_a,
        manager_b=manager_b,
        viewer_a=viewer_a,
        superuser=superuser,
    )


@pytest.fixture()
def seed(db_session):
    return seed_inventory(db_session)


@pytest.fixture()
def seed_factory():
    return seed_inventory
