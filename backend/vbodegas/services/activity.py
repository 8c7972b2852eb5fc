# File: backend/vbodegas/services/activity.py
"""Audit trail: every broadcast event is logged and stored as an ActivityLog row."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from vbodegas.db import models

logger = logging.getLogger(__name__)


def broadcast_log(db: Session, event_type: str, **payload: Any) -> Dict[str, Any]:
    """
    Record an activity event. Failures to persist are logged and rolled back,
    not raised.
    """
    event = {
        "type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **payload,
    }
    logger.info(f"[ACTIVITY] {event_type}: {payload}")

    try:
        db.add(models.ActivityLog(
            type=event_type,
            user=payload.get("user"),
            payload=json.dumps(event, default=str, ensure_ascii=False),
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"[ACTIVITY] Failed to store {event_type} event: {e}")
    return event
