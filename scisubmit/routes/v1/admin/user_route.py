from flask import jsonify, request
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import Role
from scisubmit.routes.v1.admin import admin_bp
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event
from scisubmit.schemas import AdminUserCreateSchema, AdminUserUpdateSchema, UserFilterSchema, UserSchema
from scisubmit.services import user_service
from scisubmit.utils.decorator import require_roles

user_schema = UserSchema()
users_schema = UserSchema(many=True)
user_filter_schema = UserFilterSchema()
admin_user_create_schema = AdminUserCreateSchema()
admin_user_update_schema = AdminUserUpdateSchema()


@admin_bp.route('/users', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_users():
    filters = user_filter_schema.load(request.args.to_dict())
    return jsonify(users_schema.dump(user_service.list_users(**filters))), 200


@admin_bp.route('/reviewers', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_reviewers():
    return jsonify(users_schema.dump(user_service.list_reviewers())), 200


@admin_bp.route('/users/<user_id>', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def get_user(user_id):
    return jsonify(user_schema.dump(user_service.get_user(user_id))), 200


@admin_bp.route('/users', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def create_user():
    actor_id, _ = _resolve_actor_context("admin_create_user")
    data = admin_user_create_schema.load(json_payload())
    with audited("user.create", actor_id, email=data["email"]):
        user = user_service.create_user(current_user(), data)
    log_audit_event("user.create.success", actor_id, {"email": user.email, "role": user.role.value},
                    ip_address=request.remote_addr, target_user_id=str(user.id))
    return jsonify(user_schema.dump(user)), 201


@admin_bp.route('/users/<user_id>', methods=['PUT'])
@jwt_required()
@require_roles(Role.ADMIN)
def update_user(user_id):
    actor_id, _ = _resolve_actor_context("admin_update_user")
    data = admin_user_update_schema.load(json_payload())
    with audited("user.update", actor_id, target_user_id=user_id):
        user = user_service.update_user(current_user(), user_id, data)
    log_audit_event("user.update.success", actor_id, {"fields": sorted(k for k in data if k != "password")},
                    ip_address=request.remote_addr, target_user_id=user_id)
    return jsonify(user_schema.dump(user)), 200


@admin_bp.route('/users/<user_id>', methods=['DELETE'])
@jwt_required()
@require_roles(Role.ADMIN)
def delete_user(user_id):
    actor_id, _ = _resolve_actor_context("admin_delete_user")
    with audited("user.delete", actor_id, target_user_id=user_id):
        user_service.delete_user(current_user(), user_id)
    log_audit_event("user.delete.success", actor_id, {}, ip_address=request.remote_addr, target_user_id=user_id)
    return jsonify({"message": "User deleted"}), 200
