from flask import Blueprint, jsonify, request, send_file
from flask_jwt_extended import jwt_required

from scisubmit.errors import ValidationError
from scisubmit.models.enumerations import Role
from scisubmit.schemas import (
    ContactAdminSchema,
    PaperSchema,
    QuestionSchema,
    ReviewDraftSchema,
    ReviewSchema,
    UserSummarySchema,
)
from scisubmit.services import catalog_service, paper_service, review_service
from scisubmit.utils.decorator import require_roles
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event

reviewer_bp = Blueprint("reviewer_bp", __name__)

# Reviewers see the paper without its author's account details.
paper_schema = PaperSchema(exclude=("user", "user_id"))
papers_schema = PaperSchema(many=True, exclude=("user", "user_id"))
review_schema = ReviewSchema()
reviews_schema = ReviewSchema(many=True)
review_draft_schema = ReviewDraftSchema()
questions_schema = QuestionSchema(many=True)
admins_schema = UserSummarySchema(many=True)
contact_admin_schema = ContactAdminSchema()


@reviewer_bp.route("/papers", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def papers_awaiting_review():
    reviewer = current_user()
    if request.args.get("scope") == "all":
        return jsonify(papers_schema.dump(review_service.assigned_papers(reviewer))), 200
    return jsonify(papers_schema.dump(review_service.awaiting_review(reviewer))), 200


@reviewer_bp.route("/papers/<paper_id>", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def get_assigned_paper(paper_id):
    return jsonify(paper_schema.dump(review_service.get_assigned_paper(current_user(), paper_id))), 200


@reviewer_bp.route("/papers/<paper_id>/download", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def download_paper(paper_id):
    path, name = paper_service.file_for(current_user(), paper_id)
    return send_file(path, as_attachment=True, download_name=name)


@reviewer_bp.route("/papers/<paper_id>/review", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def get_review_for_paper(paper_id):
    return jsonify(review_schema.dump(review_service.get_review_for_paper(current_user(), paper_id))), 200


@reviewer_bp.route("/reviews", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def list_reviews():
    reviewer = current_user()
    if request.args.get("sent") in ("1", "true"):
        return jsonify(reviews_schema.dump(review_service.list_sent_reviews(reviewer))), 200
    return jsonify(reviews_schema.dump(review_service.list_reviews(reviewer))), 200


@reviewer_bp.route("/reviews", methods=["POST"])
@jwt_required()
@require_roles(Role.REVIEWER)
def save_draft():
    actor_id, _ = _resolve_actor_context("save_review_draft")
    data = review_draft_schema.load(json_payload())
    if not data.get("paper_id"):
        raise ValidationError("paper_id is required", details={"paper_id": "Required"})
    with audited("review.draft", actor_id, paper_id=str(data["paper_id"])):
        review = review_service.create_or_update_draft(
            current_user(),
            data["paper_id"],
            responses=data.get("responses"),
            recommendation=data.get("recommendation"),
            comments=data.get("comments"),
        )
    log_audit_event("review.draft.success", actor_id,
                    {"review_id": str(review.id), "paper_id": str(review.paper_id)}, ip_address=request.remote_addr)
    return jsonify(review_schema.dump(review)), 200


@reviewer_bp.route("/reviews/<review_id>", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def get_review(review_id):
    return jsonify(review_schema.dump(review_service.get_review(current_user(), review_id))), 200


@reviewer_bp.route("/reviews/<review_id>", methods=["PUT"])
@jwt_required()
@require_roles(Role.REVIEWER)
def update_draft(review_id):
    actor_id, _ = _resolve_actor_context("update_review_draft")
    data = review_draft_schema.load(json_payload())
    with audited("review.draft", actor_id, review_id=review_id):
        review = review_service.update_draft(
            current_user(),
            review_id,
            responses=data.get("responses"),
            recommendation=data.get("recommendation"),
            comments=data.get("comments"),
        )
    log_audit_event("review.draft.success", actor_id, {"review_id": review_id}, ip_address=request.remote_addr)
    return jsonify(review_schema.dump(review)), 200


@reviewer_bp.route("/reviews/<review_id>/send", methods=["POST"])
@jwt_required()
@require_roles(Role.REVIEWER)
def send_review(review_id):
    actor_id, _ = _resolve_actor_context("send_review")
    with audited("review.send", actor_id, review_id=review_id):
        review = review_service.send(current_user(), review_id)
    log_audit_event(
        event_type="review.send.success",
        user_id=actor_id,
        details={
            "review_id": review_id,
            "paper_id": str(review.paper_id),
            "recommendation": review.recommendation.value if review.recommendation else None,
            "paper_status": review.paper.status.value,
        },
        ip_address=request.remote_addr,
    )
    return jsonify(review_schema.dump(review)), 200


@reviewer_bp.route("/reviews/<review_id>", methods=["DELETE"])
@jwt_required()
@require_roles(Role.REVIEWER)
def delete_draft(review_id):
    actor_id, _ = _resolve_actor_context("delete_review_draft")
    with audited("review.delete", actor_id, review_id=review_id):
        review_service.delete_draft(current_user(), review_id)
    log_audit_event("review.delete.success", actor_id, {"review_id": review_id}, ip_address=request.remote_addr)
    return jsonify({"message": "Draft deleted"}), 200


@reviewer_bp.route("/questions", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER, Role.ADMIN)
def list_questions():
    return jsonify(questions_schema.dump(catalog_service.list_questions(request.args.get("category")))), 200


@reviewer_bp.route("/admins", methods=["GET"])
@jwt_required()
@require_roles(Role.REVIEWER)
def list_admins():
    return jsonify(admins_schema.dump(review_service.list_admins())), 200


@reviewer_bp.route("/contact-admin", methods=["POST"])
@jwt_required()
@require_roles(Role.REVIEWER)
def contact_admin():
    actor_id, _ = _resolve_actor_context("contact_admin")
    data = contact_admin_schema.load(json_payload())
    sent = review_service.contact_admin(current_user(), data["subject"], data["message"], data.get("admin_id"))
    log_audit_event("reviewer.contact_admin.success", actor_id,
                    {"subject": data["subject"], "delivered": sent}, ip_address=request.remote_addr)
    return jsonify({"message": "Message sent", "delivered": sent}), 200
