"""Audit trail for admin mutations, written in the caller's transaction."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.models.activity_log import ActivityLog

MAX_ACTIVITY_PAGE = 500


def log_activity(
    db: Session,
    *,
    actor_id: str | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> ActivityLog:
    """Queue an audit row on ``db``; it is written by the caller's next commit."""
    entry = ActivityLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    db.add(entry)
    return entry


def recent_activity(
    db: Session,
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    limit: int = 100,
) -> list[ActivityLog]:
    statement = select(ActivityLog)
    if entity_type:
        statement = statement.where(ActivityLog.entity_type == entity_type)
    if entity_id:
        statement = statement.where(ActivityLog.entity_id == entity_id)
    statement = statement.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
    return list(db.execute(statement.limit(max(1, min(limit, MAX_ACTIVITY_PAGE)))).scalars())
