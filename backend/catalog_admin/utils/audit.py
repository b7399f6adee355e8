from flask import current_app, g
from catalog_admin.extensions import db
from catalog_admin.models.activity_log import ActivityLog
from typing import Any, Dict, Optional


def record_activity(
    action: str,
    resource_type: str,
    resource_id: Optional[str],
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    *,
    actor_id: Optional[str] = None,
) -> None:
    """
    Fire-and-forget activity sink.

    Runs after the main write has committed. Any failure is rolled back and
    logged, never raised to the caller.
    """
    try:
        log = ActivityLog()

        log.actor_id = actor_id or g.get("actor_id")
        log.action = action
        log.resource_type = resource_type
        log.resource_id = resource_id
        log.old_values = before
        log.new_values = after

        db.session.add(log)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception(
            f"Could not record activity {action} for {resource_type}:{resource_id}"
        )
