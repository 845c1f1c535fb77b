from __future__ import annotations

from typing import Any, Dict, List, Optional

from scisubmit.extensions import db
from scisubmit.models.Review import Question, Review, ReviewResponse
from scisubmit.utils.logging_utils import get_logger, log_context

from .base import create_instance, delete_instance, get_instance, list_instances, update_instance

logger = get_logger("review")


def get_review_by_id(review_id, *, actor_id=None) -> Optional[Review]:
    return get_instance(Review, review_id, actor_id=actor_id)


def find_review(paper_id, reviewer_id) -> Optional[Review]:
    return Review.query.filter_by(paper_id=paper_id, reviewer_id=reviewer_id).first()


def find_sent_review(paper_id) -> Optional[Review]:
    return Review.query.filter_by(paper_id=paper_id, is_draft=False).first()


def list_reviews(*, reviewer_id=None, paper_id=None, sent_only: bool = False, actor_id=None) -> List[Review]:
    filters = []
    if reviewer_id is not None:
        filters.append(Review.reviewer_id == reviewer_id)
    if paper_id is not None:
        filters.append(Review.paper_id == paper_id)
    if sent_only:
        filters.append(Review.is_draft.is_(False))
    return list_instances(Review, filters=filters, order_by=Review.updated_at.desc(), actor_id=actor_id)


def create_review(*, actor_id=None, **attributes) -> Review:
    return create_instance(Review, commit=False, flush=True, actor_id=actor_id, event_name="review.create",
                           **attributes)


def update_review(review: Review, *, actor_id=None, event_name: Optional[str] = None, **attributes) -> Review:
    return update_instance(review, commit=False, actor_id=actor_id, event_name=event_name or "review.update",
                           **attributes)


def replace_responses(review: Review, answers: List[Dict[str, Any]]) -> None:
    """Swap the review's responses for ``answers`` (``[{"question_id": UUID, "answer": ...}]``)."""
    with log_context(module="review_utils", action="replace_responses"):
        review.responses.clear()
        db.session.flush()
        for item in answers:
            review.responses.append(ReviewResponse(question_id=item["question_id"], answer=item.get("answer")))
        logger.debug("replace_responses review=%s count=%s", review.id, len(answers))


def delete_review(review: Review, *, actor_id=None) -> None:
    delete_instance(review, commit=False, actor_id=actor_id, event_name="review.delete")


def delete_reviews(reviews: List[Review], *, actor_id=None) -> int:
    for review in reviews:
        delete_review(review, actor_id=actor_id)
    return len(reviews)


# --- Questions ---

def get_question_by_id(question_id) -> Optional[Question]:
    return get_instance(Question, question_id)


def get_questions_by_ids(question_ids) -> Dict[Any, Question]:
    if not question_ids:
        return {}
    rows = Question.query.filter(Question.id.in_(list(question_ids))).all()
    return {row.id: row for row in rows}


def list_questions(*, category: Optional[str] = None) -> List[Question]:
    filters = [Question.category == category] if category else []
    return list_instances(Question, filters=filters, order_by=Question.created_at.asc())


def create_question(*, actor_id=None, **attributes) -> Question:
    return create_instance(Question, commit=True, actor_id=actor_id, event_name="question.create", **attributes)


def update_question(question: Question, *, actor_id=None, **attributes) -> Question:
    return update_instance(question, commit=True, actor_id=actor_id, event_name="question.update", **attributes)


def question_in_use(question: Question) -> bool:
    return db.session.query(ReviewResponse.id).filter_by(question_id=question.id).first() is not None


def delete_question(question: Question, *, actor_id=None) -> None:
    delete_instance(question, commit=True, actor_id=actor_id, event_name="question.delete")
