import json
from datetime import datetime, timezone

from scisubmit.extensions import db


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    event = db.Column(db.String(64), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=True)  # actor
    target_user_id = db.Column(db.String(64), nullable=True)
    ip = db.Column(db.String(64), nullable=True)
    detail = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @staticmethod
    def validate_detail_format(detail):
        """Store dicts as JSON text; strings pass through untouched."""
        if detail is None or isinstance(detail, str):
            return detail
        try:
            return json.dumps(detail, default=str)
        except (TypeError, ValueError):
            return str(detail)
