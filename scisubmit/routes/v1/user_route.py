from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from scisubmit.schemas import ChangePasswordSchema, ProfileUpdateSchema, UserSchema
from scisubmit.services import user_service
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event

user_bp = Blueprint("user_bp", __name__)

user_schema = UserSchema()
profile_update_schema = ProfileUpdateSchema()
change_password_schema = ChangePasswordSchema()


@user_bp.route("/profile", methods=["GET"])
@jwt_required()
def get_profile():
    return jsonify(user_schema.dump(current_user())), 200


@user_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile():
    actor_id, _ = _resolve_actor_context("update_profile")
    data = profile_update_schema.load(json_payload())
    with audited("user.profile", actor_id):
        user = user_service.update_profile(current_user(), data)
    log_audit_event("user.profile.success", actor_id, {"fields": sorted(data)}, ip_address=request.remote_addr)
    return jsonify(user_schema.dump(user)), 200


@user_bp.route("/change-password", methods=["POST"])
@jwt_required()
def change_password():
    actor_id, _ = _resolve_actor_context("change_password")
    data = change_password_schema.load(json_payload())
    with audited("user.change_password", actor_id):
        user_service.change_password(current_user(), data["current_password"], data["new_password"])
    log_audit_event("user.change_password.success", actor_id, {}, ip_address=request.remote_addr)
    return jsonify({"message": "Password changed. Please log in again on other devices."}), 200
