"""Categories and review-form questions (admin-managed reference data)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from scisubmit.errors import Conflict, NotFound, ValidationError
from scisubmit.models.Conference import Category
from scisubmit.models.Review import Question
from scisubmit.models.enumerations import QuestionType
from scisubmit.utils.model_utils import conference_utils, paper_utils, review_utils


# --- Categories ---

def get_category(category_id) -> Category:
    category = conference_utils.get_category_by_id(category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def list_categories(active_only: bool = False) -> List[Category]:
    return conference_utils.list_categories(active_only=active_only)


def _unique_name(name: Optional[str], current: Optional[Category] = None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required", details={"name": "Required"})
    existing = conference_utils.get_category_by_name(name)
    if existing is not None and existing is not current:
        raise Conflict("A category with this name already exists")
    return name


def create_category(admin, data: Dict[str, Any]) -> Category:
    name = _unique_name(data.get("name"))
    return conference_utils.create_category(actor_id=admin.id, name=name, is_active=data.get("is_active", True))


def update_category(admin, category_id, data: Dict[str, Any]) -> Category:
    category = get_category(category_id)
    changes: Dict[str, Any] = {}
    if "name" in data:
        changes["name"] = _unique_name(data["name"], category)
    if "is_active" in data:
        changes["is_active"] = bool(data["is_active"])
    return conference_utils.update_category(category, actor_id=admin.id, **changes)


def delete_category(admin, category_id) -> None:
    category = get_category(category_id)
    if paper_utils.count_papers(category_id=category.id):
        raise Conflict("Category is used by papers; deactivate it instead")
    conference_utils.delete_category(category, actor_id=admin.id)


# --- Questions ---

def _normalize_options(question_type: QuestionType, options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    options = dict(options or {})
    if question_type == QuestionType.RATING:
        low, high = options.get("min", 1), options.get("max", 5)
        if not isinstance(low, int) or not isinstance(high, int) or low >= high:
            raise ValidationError("Rating questions need integer min < max", details={"options": "Invalid range"})
        options.update({"min": low, "max": high})
    return options


def get_question(question_id) -> Question:
    question = review_utils.get_question_by_id(question_id)
    if question is None:
        raise NotFound("Question not found")
    return question


def list_questions(category: Optional[str] = None) -> List[Question]:
    return review_utils.list_questions(category=category)


def create_question(admin, data: Dict[str, Any]) -> Question:
    text = (data.get("text") or "").strip()
    if not text:
        raise ValidationError("Question text is required", details={"text": "Required"})
    question_type = QuestionType(data.get("type") or QuestionType.TEXT)
    return review_utils.create_question(
        actor_id=admin.id,
        text=text,
        type=question_type,
        options=_normalize_options(question_type, data.get("options")),
        category=data.get("category"),
    )


def update_question(admin, question_id, data: Dict[str, Any]) -> Question:
    question = get_question(question_id)
    changes: Dict[str, Any] = {}
    if "text" in data:
        if not (data["text"] or "").strip():
            raise ValidationError("Question text is required", details={"text": "Required"})
        changes["text"] = data["text"].strip()
    if "category" in data:
        changes["category"] = data["category"]
    question_type = QuestionType(data.get("type") or question.type)
    if "type" in data or "options" in data:
        options = _normalize_options(question_type, data.get("options", question.options))
        reshaped = question_type != question.type or options != (question.options or {})
        # stored answers are read against the current type and options
        if reshaped and review_utils.question_in_use(question):
            raise Conflict("Question has recorded answers; only its text and category can change")
        changes["type"] = question_type
        changes["options"] = options
    return review_utils.update_question(question, actor_id=admin.id, **changes)


def delete_question(admin, question_id) -> None:
    question = get_question(question_id)
    if review_utils.question_in_use(question):
        raise Conflict("Question has recorded answers and cannot be deleted")
    review_utils.delete_question(question, actor_id=admin.id)
