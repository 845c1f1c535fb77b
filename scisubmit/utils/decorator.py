from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from scisubmit.utils.logging_utils import get_logger

logger = get_logger("auth")


def require_roles(*roles):
    """
    Allow the wrapped view only when the token's ``role`` claim is one of
    ``roles``. Stack it under ``@jwt_required()``.
    """
    allowed = {getattr(role, "value", role) for role in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt() or {}
            role = claims.get("role")
            if role not in allowed:
                logger.warning("role gate refused sub=%s role=%s needed=%s", claims.get("sub"), role, sorted(allowed))
                return jsonify({"error": "forbidden", "message": "You do not have access to this resource"}), 403
            return fn(*args, **kwargs)

        return wrapper

    return decorator
