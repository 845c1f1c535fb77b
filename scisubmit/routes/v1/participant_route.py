from flask import Blueprint, jsonify, request, send_file
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import Role
from scisubmit.schemas import (
    PARTICIPANT_PAPER_EXCLUDE,
    CategorySchema,
    ConferenceSchema,
    PaperEditSchema,
    PaperSchema,
    PaperSubmitSchema,
    ReviewSchema,
)
from scisubmit.services import catalog_service, conference_service, paper_service
from scisubmit.services.paper_service import Upload
from scisubmit.utils.decorator import require_roles
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, form_payload, log_audit_event

participant_bp = Blueprint("participant_bp", __name__)

paper_schema = PaperSchema(exclude=PARTICIPANT_PAPER_EXCLUDE)
papers_schema = PaperSchema(many=True, exclude=PARTICIPANT_PAPER_EXCLUDE)
paper_submit_schema = PaperSubmitSchema()
paper_edit_schema = PaperEditSchema()
review_schema = ReviewSchema(exclude=("reviewer_id",))
conferences_schema = ConferenceSchema(many=True)
categories_schema = CategorySchema(many=True)


@participant_bp.route("/conferences", methods=["GET"])
@jwt_required()
def list_conferences():
    return jsonify(conferences_schema.dump(conference_service.list_ongoing())), 200


@participant_bp.route("/categories", methods=["GET"])
@jwt_required()
def list_categories():
    return jsonify(categories_schema.dump(catalog_service.list_categories(active_only=True))), 200


@participant_bp.route("/papers", methods=["GET"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def my_papers():
    return jsonify(papers_schema.dump(paper_service.my_papers(current_user()))), 200


@participant_bp.route("/papers", methods=["POST"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def submit_paper():
    actor_id, _ = _resolve_actor_context("submit_paper")
    data = paper_submit_schema.load(form_payload())
    upload = Upload.from_storage(request.files.get("file"))
    with audited("paper.create", actor_id, conference_id=str(data["conference_id"])):
        paper = paper_service.submit(current_user(), data, upload)
    log_audit_event(
        event_type="paper.create.success",
        user_id=actor_id,
        details={"paper_id": str(paper.id), "status": paper.status.value, "conference_id": str(paper.conference_id)},
        ip_address=request.remote_addr,
    )
    return jsonify(paper_schema.dump(paper)), 201


@participant_bp.route("/papers/<paper_id>", methods=["GET"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def get_paper(paper_id):
    return jsonify(paper_schema.dump(paper_service.get_own_paper(current_user(), paper_id))), 200


@participant_bp.route("/papers/<paper_id>", methods=["PUT"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def edit_paper(paper_id):
    actor_id, _ = _resolve_actor_context("edit_paper")
    data = paper_edit_schema.load(form_payload())
    upload = Upload.from_storage(request.files.get("file"))
    with audited("paper.update", actor_id, paper_id=paper_id):
        paper = paper_service.edit(current_user(), paper_id, data, upload)
    log_audit_event(
        event_type="paper.update.success",
        user_id=actor_id,
        details={"paper_id": str(paper.id), "fields": sorted(data), "file": upload is not None,
                 "status": paper.status.value},
        ip_address=request.remote_addr,
    )
    return jsonify(paper_schema.dump(paper)), 200


@participant_bp.route("/papers/<paper_id>", methods=["DELETE"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def delete_paper(paper_id):
    actor_id, _ = _resolve_actor_context("delete_paper")
    with audited("paper.delete", actor_id, paper_id=paper_id):
        paper_service.delete(current_user(), paper_id)
    log_audit_event("paper.delete.success", actor_id, {"paper_id": paper_id}, ip_address=request.remote_addr)
    return jsonify({"message": "Paper deleted"}), 200


@participant_bp.route("/papers/<paper_id>/download", methods=["GET"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def download_paper(paper_id):
    path, name = paper_service.file_for(current_user(), paper_id)
    return send_file(path, as_attachment=True, download_name=name)


@participant_bp.route("/papers/<paper_id>/review", methods=["GET"])
@jwt_required()
@require_roles(Role.PARTICIPANT)
def get_paper_review(paper_id):
    review = paper_service.get_review_for_own_paper(current_user(), paper_id)
    return jsonify(review_schema.dump(review)), 200
