# backend/app/services/audit.py

import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.generated import AuditLog as DBAuditLog


def record_audit(
    db: Session,
    event_type: str,
    actor_user_id: Optional[int] = None,
    target_user_id: Optional[int] = None,
    payload: Optional[dict[str, Any]] = None,
) -> DBAuditLog:
    """Add an audit_log row to the current transaction. Does not commit."""
    entry = DBAuditLog(
        event_type=event_type,
        actor_user_id=actor_user_id,
        target_user_id=target_user_id,
        payload=json.dumps(payload, ensure_ascii=False, default=str) if payload is not None else None,
    )
    db.add(entry)
    return entry
