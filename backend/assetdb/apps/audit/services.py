from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from . import models, schemas

logger = logging.getLogger(__name__)


def create_audit_event(
    db: Session,
    *,
    company_id: Optional[str],
    data: schemas.AuditEventCreate,
) -> models.AuditEvent:
    event = models.AuditEvent(
        company_id=company_id,
        entity_type=data.entity_type,
        entity_id=data.entity_id,
        action=data.action,
        actor_user_id=data.actor_user_id,
        target_type=data.target_type,
        target_id=data.target_id,
        note=data.note,
        before=data.before,
        after=data.after,
        metadata_json=data.metadata,
    )
    if data.occurred_at is not None:
        event.occurred_at = data.occurred_at
    db.add(event)
    db.flush()
    return event


def log_event(
    db: Session,
    *,
    company_id: Optional[str],
    actor_user_id: Optional[str],
    entity_type: str,
    entity_id: str,
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    note: Optional[str] = None,
    before: Optional[dict] = None,
    after: Optional[dict] = None,
    metadata: Optional[dict] = None,
    critical: bool = False,
) -> Optional[models.AuditEvent]:
    """
    Audit event logger.
    - The event is written inside a SAVEPOINT, so a failed write rolls back
      only the event and the caller's unit of work stays usable.
    - For critical actions (checkout), raise on failure so the caller's
      transaction is abandoned with the write it was recording.
    - For non-critical actions, log a warning and continue.
    """
    try:
        with db.begin_nested():
            return create_audit_event(
                db,
                company_id=company_id,
                data=schemas.AuditEventCreate(
                    entity_type=entity_type,
                    entity_id=entity_id,
                    action=action,
                    actor_user_id=actor_user_id,
                    target_type=target_type,
                    target_id=target_id,
                    note=note,
                    before=before,
                    after=after,
                    metadata=metadata,
                ),
            )
    except Exception:
        logger.warning(
            "Failed to log audit event",
            extra={
                "company_id": company_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "critical": critical,
            },
        )
        if critical:
            raise
        return None


def list_audit_events(
    db: Session,
    *,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Sequence[models.AuditEvent]:
    query = db.query(models.AuditEvent)
    if entity_type:
        query = query.filter(models.AuditEvent.entity_type == entity_type)
    if entity_id:
        query = query.filter(models.AuditEvent.entity_id == entity_id)
    if action:
        query = query.filter(models.AuditEvent.action == action)
    if start:
        query = query.filter(models.AuditEvent.occurred_at >= start)
    if end:
        query = query.filter(models.AuditEvent.occurred_at <= end)
    return query.order_by(models.AuditEvent.occurred_at.desc()).all()
