from flask import jsonify, request
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import Role
from scisubmit.routes.v1.admin import admin_bp
from scisubmit.schemas import AuditLogSchema
from scisubmit.utils.decorator import require_roles
from scisubmit.utils.model_utils import audit_log_utils

audit_logs_schema = AuditLogSchema(many=True)

MAX_PAGE_SIZE = 500


def _int_arg(name, default):
    try:
        return max(int(request.args.get(name, default)), 0)
    except (TypeError, ValueError):
        return default


@admin_bp.route('/audit-logs', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_audit_logs():
    """Newest first; filter with ``event`` (prefix) and ``user_id``."""
    limit = min(_int_arg("limit", 100) or 100, MAX_PAGE_SIZE)
    offset = _int_arg("offset", 0)
    logs = audit_log_utils.list_audit_logs(
        event_prefix=request.args.get("event"),
        user_id=request.args.get("user_id"),
        limit=limit,
        offset=offset,
    )
    return jsonify({"items": audit_logs_schema.dump(logs), "limit": limit, "offset": offset}), 200
