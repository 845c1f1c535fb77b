from __future__ import annotations

from typing import List, Optional

from scisubmit.models.AuditLog import AuditLog
from scisubmit.utils.logging_utils import get_logger

from .base import create_instance, list_instances

logger = get_logger("audit")


def create_audit_log(commit: bool = True, *, actor_id=None, **attributes) -> AuditLog:
    if "detail" in attributes:
        attributes = dict(attributes, detail=AuditLog.validate_detail_format(attributes["detail"]))
    return create_instance(AuditLog, commit=commit, actor_id=actor_id, event_name="audit_log.create", **attributes)


def list_audit_logs(*, event_prefix: Optional[str] = None, user_id: Optional[str] = None,
                    limit: int = 100, offset: int = 0) -> List[AuditLog]:
    filters = []
    if event_prefix:
        filters.append(AuditLog.event.startswith(event_prefix))
    if user_id:
        filters.append(AuditLog.user_id == str(user_id))
    return list_instances(
        AuditLog,
        filters=filters,
        order_by=[AuditLog.created_at.desc(), AuditLog.id.desc()],
        limit=limit,
        offset=offset,
    )
