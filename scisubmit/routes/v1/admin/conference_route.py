from flask import jsonify, request
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import ConferenceStatus, Role
from scisubmit.routes.v1.admin import admin_bp
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event
from scisubmit.schemas import ConferenceInputSchema, ConferenceSchema
from scisubmit.services import conference_service
from scisubmit.utils.decorator import require_roles

conference_schema = ConferenceSchema()
conferences_schema = ConferenceSchema(many=True)
conference_input_schema = ConferenceInputSchema()
conference_update_schema = ConferenceInputSchema(partial=True)


@admin_bp.route('/conferences', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_conferences():
    status = request.args.get("status")
    status = ConferenceStatus(status) if status in {s.value for s in ConferenceStatus} else None
    return jsonify(conferences_schema.dump(conference_service.list_conferences(status))), 200


@admin_bp.route('/conferences/<conference_id>', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def get_conference(conference_id):
    return jsonify(conference_schema.dump(conference_service.get_conference(conference_id))), 200


@admin_bp.route('/conferences', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def create_conference():
    actor_id, _ = _resolve_actor_context("create_conference")
    data = conference_input_schema.load(json_payload())
    with audited("conference.create", actor_id):
        conference = conference_service.create_conference(current_user(), data)
    log_audit_event(
        event_type="conference.create.success",
        user_id=actor_id,
        details={"conference_id": str(conference.id), "label": conference.label, "status": conference.status.value},
        ip_address=request.remote_addr,
    )
    return jsonify(conference_schema.dump(conference)), 201


@admin_bp.route('/conferences/<conference_id>', methods=['PUT'])
@jwt_required()
@require_roles(Role.ADMIN)
def update_conference(conference_id):
    actor_id, _ = _resolve_actor_context("update_conference")
    data = conference_update_schema.load(json_payload())
    with audited("conference.update", actor_id, conference_id=conference_id):
        conference = conference_service.update_conference(current_user(), conference_id, data)
    log_audit_event("conference.update.success", actor_id,
                    {"conference_id": conference_id, "fields": sorted(data)}, ip_address=request.remote_addr)
    return jsonify(conference_schema.dump(conference)), 200


@admin_bp.route('/conferences/<conference_id>', methods=['DELETE'])
@jwt_required()
@require_roles(Role.ADMIN)
def delete_conference(conference_id):
    actor_id, _ = _resolve_actor_context("delete_conference")
    with audited("conference.delete", actor_id, conference_id=conference_id):
        conference_service.delete_conference(current_user(), conference_id)
    log_audit_event("conference.delete.success", actor_id, {"conference_id": conference_id},
                    ip_address=request.remote_addr)
    return jsonify({"message": "Conference deleted"}), 200


@admin_bp.route('/conferences/refresh-status', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def refresh_conference_status():
    actor_id, _ = _resolve_actor_context("refresh_conference_status")
    changed = conference_service.refresh_conference_statuses()
    log_audit_event("conference.refresh_status.success", actor_id, {"changed": changed},
                    ip_address=request.remote_addr)
    return jsonify({"changed": changed}), 200
