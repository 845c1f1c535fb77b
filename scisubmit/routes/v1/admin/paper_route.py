from flask import jsonify, request, send_file
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import Role
from scisubmit.routes.v1.admin import admin_bp
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event
from scisubmit.schemas import (
    AdminPaperUpdateSchema,
    AssignReviewerSchema,
    PaperFilterSchema,
    PaperSchema,
    ReopenSchema,
    ReviewSchema,
    ReviewerAssignmentSchema,
)
from scisubmit.services import paper_service
from scisubmit.services.export_service import papers_workbook_bytes
from scisubmit.utils.clock import get_clock
from scisubmit.utils.decorator import require_roles

paper_schema = PaperSchema()
papers_schema = PaperSchema(many=True)
paper_filter_schema = PaperFilterSchema()
assign_reviewer_schema = AssignReviewerSchema()
reopen_schema = ReopenSchema()
admin_paper_update_schema = AdminPaperUpdateSchema()
assignments_schema = ReviewerAssignmentSchema(many=True)
review_schema = ReviewSchema()

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@admin_bp.route('/papers', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_papers():
    filters = paper_filter_schema.load(request.args.to_dict())
    return jsonify(papers_schema.dump(paper_service.list_papers(**filters))), 200


@admin_bp.route('/papers/export', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def export_papers():
    actor_id, _ = _resolve_actor_context("export_papers")
    filters = paper_filter_schema.load(request.args.to_dict())
    papers = paper_service.list_papers(**filters)
    log_audit_event("paper.export.success", actor_id,
                    {"count": len(papers), "filters": {k: str(v) for k, v in filters.items()}},
                    ip_address=request.remote_addr)
    return send_file(
        papers_workbook_bytes(papers),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"papers_{get_clock().today().isoformat()}.xlsx",
    )


@admin_bp.route('/papers/<paper_id>', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def get_paper(paper_id):
    return jsonify(paper_schema.dump(paper_service.get_paper(paper_id))), 200


@admin_bp.route('/papers/<paper_id>', methods=['PUT'])
@jwt_required()
@require_roles(Role.ADMIN)
def update_paper(paper_id):
    actor_id, _ = _resolve_actor_context("admin_update_paper")
    data = admin_paper_update_schema.load(json_payload())
    with audited("paper.admin_update", actor_id, paper_id=paper_id):
        paper = paper_service.admin_update(current_user(), paper_id, data)
    log_audit_event("paper.admin_update.success", actor_id,
                    {"paper_id": paper_id, "fields": sorted(data)}, ip_address=request.remote_addr)
    return jsonify(paper_schema.dump(paper)), 200


@admin_bp.route('/papers/<paper_id>', methods=['DELETE'])
@jwt_required()
@require_roles(Role.ADMIN)
def delete_paper(paper_id):
    actor_id, _ = _resolve_actor_context("admin_delete_paper")
    with audited("paper.admin_delete", actor_id, paper_id=paper_id):
        paper_service.admin_delete(current_user(), paper_id)
    log_audit_event("paper.admin_delete.success", actor_id, {"paper_id": paper_id}, ip_address=request.remote_addr)
    return jsonify({"message": "Paper deleted"}), 200


@admin_bp.route('/papers/<paper_id>/assign', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def assign_reviewer(paper_id):
    actor_id, _ = _resolve_actor_context("assign_reviewer")
    data = assign_reviewer_schema.load(json_payload())
    with audited("paper.assign", actor_id, target_user_id=str(data["reviewer_id"]), paper_id=paper_id):
        paper = paper_service.assign_reviewer(current_user(), paper_id, data["reviewer_id"])
    log_audit_event(
        event_type="paper.assign.success",
        user_id=actor_id,
        details={"paper_id": paper_id, "reviewer_id": str(paper.reviewer_id)},
        ip_address=request.remote_addr,
        target_user_id=str(paper.reviewer_id),
    )
    return jsonify(paper_schema.dump(paper)), 200


@admin_bp.route('/papers/<paper_id>/assignments', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def assignment_history(paper_id):
    return jsonify(assignments_schema.dump(paper_service.assignment_history(paper_id))), 200


@admin_bp.route('/papers/<paper_id>/reopen', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def reopen_paper(paper_id):
    actor_id, _ = _resolve_actor_context("reopen_paper")
    data = reopen_schema.load(json_payload())
    with audited("paper.reopen", actor_id, paper_id=paper_id):
        paper = paper_service.reopen(current_user(), paper_id, data["deadline_date"])
    log_audit_event("paper.reopen.success", actor_id,
                    {"paper_id": paper_id, "deadline_date": data["deadline_date"].isoformat()},
                    ip_address=request.remote_addr, target_user_id=str(paper.user_id))
    return jsonify(paper_schema.dump(paper)), 200


@admin_bp.route('/papers/<paper_id>/review', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def get_paper_review(paper_id):
    paper = paper_service.get_paper(paper_id)
    if paper.review is None:
        return jsonify({"error": "not_found", "message": "This paper has no review yet"}), 404
    return jsonify(review_schema.dump(paper.review)), 200


@admin_bp.route('/papers/<paper_id>/download', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def download_paper(paper_id):
    path, name = paper_service.file_for(current_user(), paper_id)
    return send_file(path, as_attachment=True, download_name=name)
