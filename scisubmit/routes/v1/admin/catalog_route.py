from flask import jsonify, request
from flask_jwt_extended import jwt_required

from scisubmit.models.enumerations import Role
from scisubmit.routes.v1.admin import admin_bp
from scisubmit.routes.v1.common import _resolve_actor_context, audited, current_user, json_payload, log_audit_event
from scisubmit.schemas import CategoryInputSchema, CategorySchema, QuestionInputSchema, QuestionSchema, QuestionUpdateSchema
from scisubmit.services import catalog_service
from scisubmit.utils.decorator import require_roles

category_schema = CategorySchema()
categories_schema = CategorySchema(many=True)
category_input_schema = CategoryInputSchema()
category_update_schema = CategoryInputSchema(partial=True)
question_schema = QuestionSchema()
questions_schema = QuestionSchema(many=True)
question_input_schema = QuestionInputSchema()
question_update_schema = QuestionUpdateSchema()


# ---- Categories ----

@admin_bp.route('/categories', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_categories():
    return jsonify(categories_schema.dump(catalog_service.list_categories())), 200


@admin_bp.route('/categories', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def create_category():
    actor_id, _ = _resolve_actor_context("create_category")
    data = category_input_schema.load(json_payload())
    with audited("category.create", actor_id, name=data.get("name")):
        category = catalog_service.create_category(current_user(), data)
    log_audit_event("category.create.success", actor_id, {"category_id": str(category.id), "name": category.name},
                    ip_address=request.remote_addr)
    return jsonify(category_schema.dump(category)), 201


@admin_bp.route('/categories/<category_id>', methods=['PUT'])
@jwt_required()
@require_roles(Role.ADMIN)
def update_category(category_id):
    actor_id, _ = _resolve_actor_context("update_category")
    data = category_update_schema.load(json_payload())
    with audited("category.update", actor_id, category_id=category_id):
        category = catalog_service.update_category(current_user(), category_id, data)
    log_audit_event("category.update.success", actor_id, {"category_id": category_id, "fields": sorted(data)},
                    ip_address=request.remote_addr)
    return jsonify(category_schema.dump(category)), 200


@admin_bp.route('/categories/<category_id>', methods=['DELETE'])
@jwt_required()
@require_roles(Role.ADMIN)
def delete_category(category_id):
    actor_id, _ = _resolve_actor_context("delete_category")
    with audited("category.delete", actor_id, category_id=category_id):
        catalog_service.delete_category(current_user(), category_id)
    log_audit_event("category.delete.success", actor_id, {"category_id": category_id}, ip_address=request.remote_addr)
    return jsonify({"message": "Category deleted"}), 200


# ---- Review questions ----

@admin_bp.route('/questions', methods=['GET'])
@jwt_required()
@require_roles(Role.ADMIN)
def list_questions():
    return jsonify(questions_schema.dump(catalog_service.list_questions(request.args.get("category")))), 200


@admin_bp.route('/questions', methods=['POST'])
@jwt_required()
@require_roles(Role.ADMIN)
def create_question():
    actor_id, _ = _resolve_actor_context("create_question")
    data = question_input_schema.load(json_payload())
    with audited("question.create", actor_id):
        question = catalog_service.create_question(current_user(), data)
    log_audit_event("question.create.success", actor_id, {"question_id": str(question.id)},
                    ip_address=request.remote_addr)
    return jsonify(question_schema.dump(question)), 201


@admin_bp.route('/questions/<question_id>', methods=['PUT'])
@jwt_required()
@require_roles(Role.ADMIN)
def update_question(question_id):
    actor_id, _ = _resolve_actor_context("update_question")
    data = question_update_schema.load(json_payload())
    with audited("question.update", actor_id, question_id=question_id):
        question = catalog_service.update_question(current_user(), question_id, data)
    log_audit_event("question.update.success", actor_id, {"question_id": question_id, "fields": sorted(data)},
                    ip_address=request.remote_addr)
    return jsonify(question_schema.dump(question)), 200


@admin_bp.route('/questions/<question_id>', methods=['DELETE'])
@jwt_required()
@require_roles(Role.ADMIN)
def delete_question(question_id):
    actor_id, _ = _resolve_actor_context("delete_question")
    with audited("question.delete", actor_id, question_id=question_id):
        catalog_service.delete_question(current_user(), question_id)
    log_audit_event("question.delete.success", actor_id, {"question_id": question_id}, ip_address=request.remote_addr)
    return jsonify({"message": "Question deleted"}), 200
