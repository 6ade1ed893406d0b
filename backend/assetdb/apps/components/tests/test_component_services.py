from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from assetdb.apps.accounts import services as account_services
from assetdb.apps.audit import models as audit_models
from assetdb.apps.components import models as component_models
from assetdb.apps.components import schemas as component_schemas
from assetdb.apps.components import services as component_services


def _payload(seed, **overrides) -> component_schemas.ComponentCreate:
    data = dict(
        name="DDR4 16GB",
        category_id=seed.category.id,
        location_id=seed.location.id,
        company_id=seed.company_a.id,
        order_number="PO-123",
        min_amt=2,
        serial="RAM-SER-1",
        purchase_date=date(2024, 3, 1),
        purchase_cost=Decimal("49.99"),
        qty=10,
    )
    data.update(overrides)
    return component_schemas.ComponentCreate(**data)


def test_create_then_get_round_trips_fields(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed),
    )
    db_session.commit()

    fetched = component_services.get_component(db_session, component.id)
    assert fetched.name == "DDR4 16GB"
    assert fetched.category_id == seed.category.id
    assert fetched.location_id == seed.location.id
    assert fetched.company_id == seed.company_a.id
    assert fetched.order_number == "PO-123"
    assert fetched.min_amt == 2
    assert fetched.serial == "RAM-SER-1"
    assert fetched.purchase_date == date(2024, 3, 1)
    assert Decimal(str(fetched.purchase_cost)) == Decimal("49.99")
    assert fetched.qty == 10
    assert fetched.user_id == seed.manager_a.id


def test_create_forces_restricted_users_company(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, company_id=seed.company_b.id),
    )
    db_session.commit()

    assert component.company_id == seed.company_a.id


def test_superuser_may_pick_any_company(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.superuser,
        payload=_payload(seed, company_id=seed.company_b.id),
    )
    db_session.commit()

    assert component.company_id == seed.company_b.id


def test_company_choice_is_free_when_multi_company_is_off(db_session, seed, monkeypatch):
    monkeypatch.setattr(account_services, "FULL_MULTIPLE_COMPANIES_SUPPORT", False)

    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, company_id=seed.company_b.id),
    )

    assert component.company_id == seed.company_b.id


def test_create_rejects_unknown_and_wrong_type_lookups(db_session, seed):
    with pytest.raises(component_services.ValidationError) as excinfo:
        component_services.create_component(
            db_session,
            acting_user=seed.superuser,
            payload=_payload(seed, category_id=seed.asset_category.id, location_id=9999, company_id="CO-MISSING"),
        )

    assert excinfo.value.errors == {
        "category_id": component_services.ERR_CATEGORY_TYPE,
        "location_id": component_services.ERR_EXISTS,
        "company_id": component_services.ERR_EXISTS,
    }
    assert db_session.query(component_models.Component).count() == 0


def test_update_is_full_replacement(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed),
    )
    db_session.commit()

    updated = component_services.update_component(
        db_session,
        acting_user=seed.manager_a,
        component_id=component.id,
        payload=component_schemas.ComponentUpdate(
            name="DDR5 32GB",
            category_id=seed.category.id,
            qty=4,
        ),
    )
    db_session.commit()

    assert updated.name == "DDR5 32GB"
    assert updated.qty == 4
    assert updated.location_id is None
    assert updated.order_number is None
    assert updated.min_amt is None
    assert updated.serial is None
    assert updated.purchase_date is None
    assert updated.purchase_cost is None
    # Creator is never rewritten by an update.
    assert updated.user_id == seed.manager_a.id


def test_update_missing_component_raises_not_found(db_session, seed):
    with pytest.raises(component_services.NotFoundError):
        component_services.update_component(
            db_session,
            acting_user=seed.manager_a,
            component_id=404,
            payload=component_schemas.ComponentUpdate(name="x", category_id=seed.category.id, qty=1),
        )


def test_update_cannot_drop_qty_below_checked_out(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, qty=5),
    )
    db_session.commit()
    component_services.checkout_component(
        db_session,
        component_id=component.id,
        asset_id=seed.asset_a.id,
        admin_user=seed.manager_a,
        assigned_qty=3,
    )
    db_session.commit()

    with pytest.raises(component_services.ValidationError) as excinfo:
        component_services.update_component(
            db_session,
            acting_user=seed.manager_a,
            component_id=component.id,
            payload=_payload(seed, qty=2),
        )

    assert excinfo.value.errors == {"qty": component_services.ERR_QTY_BELOW_ASSIGNED}
    assert excinfo.value.context == {"assigned": 3}


def test_delete_missing_component_raises_not_found(db_session, seed):
    with pytest.raises(component_services.NotFoundError):
        component_services.delete_component(db_session, acting_user=seed.manager_a, component_id=12345)


def test_delete_removes_component_and_records_audit(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed),
    )
    db_session.commit()
    component_id = component.id

    component_services.delete_component(db_session, acting_user=seed.manager_a, component_id=component_id)
    db_session.commit()

    assert db_session.query(component_models.Component).filter_by(id=component_id).first() is None
    actions = [
        event.action
        for event in db_session.query(audit_models.AuditEvent)
        .filter_by(entity_type="Component", entity_id=str(component_id))
        .all()
    ]
    assert sorted(actions) == ["create", "delete"]


def test_delete_blocked_while_checked_out(db_session, seed):
    component = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, qty=2),
    )
    db_session.commit()
    component_services.checkout_component(
        db_session,
        component_id=component.id,
        asset_id=seed.asset_a.id,
        admin_user=seed.manager_a,
        assigned_qty=1,
    )
    db_session.commit()

    with pytest.raises(component_services.ConflictError) as excinfo:
        component_services.delete_component(db_session, acting_user=seed.manager_a, component_id=component.id)

    assert excinfo.value.message == component_services.MSG_DELETE_ASSIGNED
    assert component_services.get_component(db_session, component.id) is not None


def test_list_is_company_scoped_and_reports_remaining(db_session, seed):
    ram = component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, name="RAM stick", qty=3, min_amt=2),
    )
    component_services.create_component(
        db_session,
        acting_user=seed.manager_b,
        payload=_payload(seed, name="Other company's SSD", location_id=None, qty=1),
    )
    component_services.create_component(
        db_session,
        acting_user=seed.superuser,
        payload=_payload(seed, name="Shared cable", company_id=None, location_id=None, min_amt=None, qty=7),
    )
    db_session.commit()
    component_services.checkout_component(
        db_session,
        component_id=ram.id,
        asset_id=seed.asset_a.id,
        admin_user=seed.manager_a,
        assigned_qty=2,
    )
    db_session.commit()

    rows = component_services.list_components(db_session, acting_user=seed.manager_a)
    by_name = {row.name: row for row in rows}

    assert set(by_name) == {"RAM stick", "Shared cable"}
    assert by_name["RAM stick"].remaining == 1
    assert by_name["RAM stick"].below_min is True
    assert by_name["RAM stick"].category_name == "RAM"
    assert by_name["RAM stick"].location_name == "Main Store"
    assert by_name["Shared cable"].remaining == 7
    assert by_name["Shared cable"].below_min is False

    everything = component_services.list_components(db_session, acting_user=seed.superuser)
    assert len(everything) == 3


def test_list_search_matches_name_serial_and_order_number(db_session, seed):
    component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, name="Fan", serial="FAN-77", order_number="PO-1"),
    )
    component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, name="PSU", serial="PSU-01", order_number="PO-FAN"),
    )
    component_services.create_component(
        db_session,
        acting_user=seed.manager_a,
        payload=_payload(seed, name="Cable", serial="C-1", order_number="PO-2"),
    )
    db_session.commit()

    rows = component_services.list_components(db_session, acting_user=seed.manager_a, search="fan")

    assert sorted(row.name for row in rows) == ["Fan", "PSU"]


def test_bulk_operations_are_unimplemented(db_session, seed):
    payload = component_schemas.ComponentBulkRequest(component_ids=[1, 2], asset_id=seed.asset_a.id)

    with pytest.raises(component_services.UnimplementedError):
        component_services.bulk_checkout(db_session, acting_user=seed.manager_a, payload=payload)
    with pytest.raises(component_services.UnimplementedError):
        component_services.bulk_save(db_session, acting_user=seed.manager_a, payload=payload)
