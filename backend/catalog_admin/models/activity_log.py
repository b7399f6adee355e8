# catalog_admin/models/activity_log.py
from catalog_admin.extensions import db
from .base import BaseModel
from sqlalchemy import event


class ActivityLog(BaseModel):
    __tablename__ = "activity_logs"

    __table_args__ = (
        db.Index("ix_activity_resource", "resource_type", "resource_id"),
    )

    actor_id = db.Column(db.String(36), nullable=True, index=True)
    action = db.Column(db.String(80), nullable=False, index=True)

    resource_type = db.Column(db.String(50), nullable=False, index=True)
    resource_id = db.Column(db.String(60), nullable=True, index=True)

    old_values = db.Column(db.JSON, nullable=True)
    new_values = db.Column(db.JSON, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "old_values": self.old_values,
            "new_values": self.new_values,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@event.listens_for(ActivityLog, 'before_update')
@event.listens_for(ActivityLog, 'before_delete')
def prevent_activity_mutation(mapper, connection, target):
    raise RuntimeError("Activity logs are immutable")
