from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from assetdb.apps.accounts import models as account_models
from assetdb.apps.audit import models as audit_models
from assetdb.apps.audit import schemas as audit_schemas
from assetdb.apps.audit import services as audit_services


def test_log_event_persists_fields(db_session):
    event = audit_services.log_event(
        db_session,
        company_id=None,
        actor_user_id=None,
        entity_type="Component",
        entity_id="7",
        action="checkout",
        target_type="Asset",
        target_id="3",
        note="for the lab",
        after={"assigned_qty": 2},
        metadata={"source": "test"},
    )
    db_session.commit()

    stored = db_session.query(audit_models.AuditEvent).filter_by(id=event.id).one()
    assert stored.note == "for the lab"
    assert stored.after == {"assigned_qty": 2}
    assert stored.metadata_json == {"source": "test"}

    read = audit_schemas.AuditEventRead.model_validate(stored)
    assert read.metadata == {"source": "test"}
    assert read.target_type == "Asset"


def test_non_critical_failure_is_swallowed(db_session, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(audit_services, "create_audit_event", _boom)

    result = audit_services.log_event(
        db_session,
        company_id=None,
        actor_user_id=None,
        entity_type="Component",
        entity_id="1",
        action="update",
    )

    assert result is None


def test_failed_write_rolls_back_only_the_event(db_session):
    db_session.execute(text("DROP TABLE audit_events"))
    db_session.commit()

    company = account_models.Company(name="Kept Co")
    db_session.add(company)
    db_session.flush()

    result = audit_services.log_event(
        db_session,
        company_id=company.id,
        actor_user_id=None,
        entity_type="Component",
        entity_id="1",
        action="create",
    )
    db_session.commit()

    assert result is None
    assert db_session.query(account_models.Company).filter_by(name="Kept Co").count() == 1


def test_critical_failure_is_raised(db_session, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(audit_services, "create_audit_event", _boom)

    with pytest.raises(RuntimeError):
        audit_services.log_event(
            db_session,
            company_id=None,
            actor_user_id=None,
            entity_type="Component",
            entity_id="1",
            action="checkout",
            critical=True,
        )


def test_list_audit_events_filters(db_session):
    now = datetime.now(timezone.utc)
    for entity_id, action, offset in (("1", "create", 3), ("1", "checkout", 2), ("2", "create", 1)):
        audit_services.create_audit_event(
            db_session,
            company_id=None,
            data=audit_schemas.AuditEventCreate(
                entity_type="Component",
                entity_id=entity_id,
                action=action,
                occurred_at=now - timedelta(hours=offset),
            ),
        )
    db_session.commit()

    for_one = audit_services.list_audit_events(db_session, entity_type="Component", entity_id="1")
    assert [event.action for event in for_one] == ["checkout", "create"]

    creates = audit_services.list_audit_events(db_session, action="create")
    assert len(creates) == 2

    recent = audit_services.list_audit_events(db_session, start=now - timedelta(hours=2, minutes=30))
    assert sorted(event.entity_id for event in recent) == ["1", "2"]
