from flask import jsonify
from flask_jwt_extended import JWTManager

from scisubmit.models.User import User
from scisubmit.models.enumerations import UserStatus
from scisubmit.security_utils import coerce_uuid
from scisubmit.extensions import db
from scisubmit.utils.logging_utils import get_logger

logger = get_logger("auth")


def init_jwt_callbacks(jwt: JWTManager):
    @jwt.user_lookup_loader
    def _load_user(jwt_header, jwt_payload):
        user_id = coerce_uuid(jwt_payload.get("sub"))
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @jwt.user_lookup_error_loader
    def _user_gone(jwt_header, jwt_payload):
        return _auth_error("auth_required", "Your account no longer exists")

    @jwt.token_verification_loader
    def _still_allowed(jwt_header, jwt_payload):
        # Tokens issued before a suspension stop working right away.
        user_id = coerce_uuid(jwt_payload.get("sub"))
        user = db.session.get(User, user_id) if user_id else None
        return user is None or user.status == UserStatus.ACTIVE

    @jwt.token_verification_failed_loader
    def _not_allowed(jwt_header, jwt_payload):
        return jsonify({"error": "account_not_active", "message": "Your account is not active"}), 403

    # ==== JWT error/edge loaders ====
    @jwt.unauthorized_loader
    def _missing_token(err_msg):
        return _auth_error("auth_required", "Please log in")

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _auth_error("token_expired", "Your session has expired")

    @jwt.invalid_token_loader
    def _invalid_token(err_msg):
        logger.warning("invalid token: %s", err_msg)
        return _auth_error("invalid_token", "Invalid token")

    @jwt.revoked_token_loader
    def _revoked_token(jwt_header, jwt_payload):
        return _auth_error("token_revoked", "This token has been revoked")


def _auth_error(code: str, message: str):
    return jsonify({"error": code, "message": message}), 401
