from flask import Blueprint

admin_bp = Blueprint('admin_bp', __name__)

from scisubmit.routes.v1.admin import (  # noqa: E402,F401
    audit_log_route,
    catalog_route,
    conference_route,
    paper_route,
    user_route,
)
