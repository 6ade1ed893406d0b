from __future__ import annotations

from datetime import date
from decimal import Decimal

from assetdb.database import WriteSessionLocal
from assetdb.apps.accounts import models as account_models
from assetdb.apps.assets import models as asset_models
from assetdb.apps.catalog import models as catalog_models
from assetdb.apps.components import models as component_models
from assetdb.apps.components import schemas as component_schemas
from assetdb.apps.components import services as component_services
from assetdb.security import get_password_hash


def _get_or_create_company(db) -> account_models.Company:
    company = db.query(account_models.Company).filter(account_models.Company.name == "Demo Company").first()
    if company:
        return company
    company = account_models.Company(name="Demo Company")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def _get_or_create_manager(db, company: account_models.Company) -> account_models.User:
    user = db.query(account_models.User).filter(account_models.User.email == "stores@demo.example").first()
    if user:
        return user
    user = account_models.User(
        company_id=company.id,
        email="stores@demo.example",
        full_name="Demo Stores Manager",
        role=account_models.AccountRole.ASSET_MANAGER,
        hashed_password=get_password_hash("ChangeMe123!"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _get_or_create_category(db) -> catalog_models.Category:
    category = (
        db.query(catalog_models.Category)
        .filter(
            catalog_models.Category.name == "Memory",
            catalog_models.Category.category_type == catalog_models.CategoryTypeEnum.COMPONENT,
        )
        .first()
    )
    if category:
        return category
    category = catalog_models.Category(name="Memory", category_type=catalog_models.CategoryTypeEnum.COMPONENT)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def _get_or_create_location(db, company: account_models.Company) -> catalog_models.Location:
    location = (
        db.query(catalog_models.Location)
        .filter(catalog_models.Location.company_id == company.id, catalog_models.Location.name == "IT Store")
        .first()
    )
    if location:
        return location
    location = catalog_models.Location(company_id=company.id, name="IT Store")
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


def _get_or_create_asset(db, company: account_models.Company, tag: str, name: str) -> asset_models.Asset:
    asset = db.query(asset_models.Asset).filter(asset_models.Asset.asset_tag == tag).first()
    if asset:
        return asset
    asset = asset_models.Asset(company_id=company.id, asset_tag=tag, name=name, serial=f"SN-{tag}")
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def _get_or_create_component(db, manager, category, location) -> component_models.Component:
    component = (
        db.query(component_models.Component)
        .filter(
            component_models.Component.company_id == manager.company_id,
            component_models.Component.name == "DDR4 16GB SODIMM",
        )
        .first()
    )
    if component:
        return component
    component = component_services.create_component(
        db,
        acting_user=manager,
        payload=component_schemas.ComponentCreate(
            name="DDR4 16GB SODIMM",
            category_id=category.id,
            location_id=location.id,
            order_number="PO-DEMO-001",
            min_amt=4,
            serial=None,
            purchase_date=date(2024, 1, 15),
            purchase_cost=Decimal("42.50"),
            qty=20,
        ),
    )
    db.commit()
    db.refresh(component)
    return component


def main() -> None:
    db = WriteSessionLocal()
    try:
        company = _get_or_create_company(db)
        manager = _get_or_create_manager(db, company)
        category = _get_or_create_category(db)
        location = _get_or_create_location(db, company)
        laptops = [
            _get_or_create_asset(db, company, "DEMO-LT-001", "Engineering laptop"),
            _get_or_create_asset(db, company, "DEMO-LT-002", "Design laptop"),
        ]
        component = _get_or_create_component(db, manager, category, location)

        if not component.assignments:
            for laptop in laptops:
                component_services.checkout_component(
                    db,
                    component_id=component.id,
                    asset_id=laptop.id,
                    admin_user=manager,
                    assigned_qty=2,
                    note="Demo memory upgrade",
                )
            db.commit()

        print("[OK] Demo data ready:")
        print(f"  company:   {company.name} ({company.id})")
        print(f"  manager:   {manager.email}")
        print(f"  component: {component.name} id={component.id}")
        print(f"  remaining: {component_services.remaining_stock(db, component)} of {component.qty}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
