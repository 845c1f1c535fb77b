"""
Review workflow: NoReview -> Draft -> Sent.

A draft belongs to its author and can be rewritten freely until the review
deadline. Sending is irrevocable: the recommendation moves the paper through
the lifecycle table and the author of the paper is notified.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from scisubmit.errors import AlreadySent, Forbidden, InvalidState, NotFound, ReviewDeadlineExpired, ValidationError
from scisubmit.extensions import db
from scisubmit.models.Paper import Paper
from scisubmit.models.Review import Question, Review
from scisubmit.models.User import User
from scisubmit.models.enumerations import PaperStatus, QuestionType, Recommendation, Role, UserStatus
from scisubmit.services import notifications, workflow
from scisubmit.security_utils import coerce_uuid
from scisubmit.utils.clock import get_clock, is_past
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.model_utils import paper_utils, review_utils, user_utils

logger = get_logger("review")


def _require_reviewer(user: User) -> None:
    if user.role != Role.REVIEWER:
        raise Forbidden("Only reviewers can write reviews")


def _check_deadline(paper: Paper) -> None:
    if is_past(paper.conference.deadline_review):
        raise ReviewDeadlineExpired("The review deadline for this conference has passed")


def _assigned_paper(reviewer: User, paper_id) -> Paper:
    paper = paper_utils.get_paper_by_id(paper_id)
    if paper is None:
        raise NotFound("Paper not found")
    if paper.reviewer_id != reviewer.id:
        raise Forbidden("This paper is not assigned to you")
    return paper


def _authored_review(reviewer: User, review_id) -> Review:
    review = review_utils.get_review_by_id(review_id)
    if review is None:
        raise NotFound("Review not found")
    if review.reviewer_id != reviewer.id:
        raise Forbidden("You are not the author of this review")
    return review


def _check_answer(question: Question, answer: Any) -> Optional[str]:
    if answer is None:
        return None
    if question.type == QuestionType.RATING:
        if isinstance(answer, bool) or not isinstance(answer, (int, float)):
            return "Rating must be a number"
        low, high = question.options.get("min", 1), question.options.get("max", 5)
        if not low <= answer <= high:
            return f"Rating must be between {low} and {high}"
    elif question.type == QuestionType.YES_NO:
        if not isinstance(answer, bool):
            return "Answer must be true or false"
    elif not isinstance(answer, str):
        return "Answer must be text"
    return None


def _clean_responses(responses: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    items = list(responses or [])
    ids = []
    errors: Dict[str, str] = {}
    for index, item in enumerate(items):
        question_id = coerce_uuid(item.get("question_id") or item.get("question"))
        if question_id is None:
            errors[str(index)] = "Unknown question"
        ids.append(question_id)
    questions = review_utils.get_questions_by_ids([qid for qid in ids if qid is not None])

    cleaned = []
    seen = set()
    for index, (item, question_id) in enumerate(zip(items, ids)):
        if question_id is None:
            continue
        question = questions.get(question_id)
        if question is None:
            errors[str(index)] = "Unknown question"
            continue
        if question_id in seen:
            errors[str(index)] = "Question answered twice"
            continue
        seen.add(question_id)
        problem = _check_answer(question, item.get("answer"))
        if problem:
            errors[str(index)] = problem
            continue
        cleaned.append({"question_id": question_id, "answer": item.get("answer")})
    if errors:
        raise ValidationError("Invalid review responses", details=errors)
    return cleaned


def _recommendation(value) -> Optional[Recommendation]:
    if value in (None, ""):
        return None
    try:
        return Recommendation(value)
    except ValueError:
        raise ValidationError("Unknown recommendation", details={"recommendation": str(value)}) from None


def create_or_update_draft(reviewer: User, paper_id, responses=None, recommendation=None, comments=None) -> Review:
    _require_reviewer(reviewer)
    paper = _assigned_paper(reviewer, paper_id)
    existing = review_utils.find_review(paper.id, reviewer.id)
    if existing is not None and not existing.is_draft:
        raise AlreadySent("This review has already been sent")
    if paper.status != PaperStatus.UNDER_REVIEW:
        raise InvalidState("Only papers under review can be reviewed")
    _check_deadline(paper)
    cleaned = _clean_responses(responses)
    rec = _recommendation(recommendation)

    with log_context(module="review_service", action="save_draft", actor_id=str(reviewer.id)):
        review = existing or review_utils.create_review(
            actor_id=reviewer.id, paper_id=paper.id, reviewer_id=reviewer.id, is_draft=True,
        )
        review_utils.update_review(review, actor_id=reviewer.id, event_name="review.draft",
                                   recommendation=rec, comments=comments)
        review_utils.replace_responses(review, cleaned)
        db.session.commit()
        logger.info("draft review %s saved for paper %s", review.id, paper.id)
        return review


def update_draft(reviewer: User, review_id, responses=None, recommendation=None, comments=None) -> Review:
    review = _authored_review(reviewer, review_id)
    if not review.is_draft:
        raise AlreadySent("This review has already been sent")
    return create_or_update_draft(reviewer, review.paper_id, responses, recommendation, comments)


def send(reviewer: User, review_id) -> Review:
    review = _authored_review(reviewer, review_id)
    if not review.is_draft:
        raise AlreadySent("This review has already been sent")
    paper = review.paper
    if paper.reviewer_id != reviewer.id:
        raise Forbidden("This paper is no longer assigned to you")
    _check_deadline(paper)
    other = review_utils.find_sent_review(paper.id)
    if other is not None and other.id != review.id:
        raise AlreadySent("This paper already has a sent review")
    event = workflow.event_for_recommendation(review.recommendation)
    workflow.next_status(paper.status, event)

    with log_context(module="review_service", action="send", actor_id=str(reviewer.id)):
        review_utils.update_review(review, actor_id=reviewer.id, event_name="review.send",
                                   is_draft=False, sent_at=get_clock().now())
        workflow.apply_transition(paper, event)
        db.session.commit()
        db.session.refresh(paper)
        logger.info("review %s sent; paper %s now %s", review.id, paper.id, paper.status.value)

    notifications.review_decision(paper.user, paper)
    return review


def delete_draft(reviewer: User, review_id) -> None:
    review = _authored_review(reviewer, review_id)
    if not review.is_draft:
        raise InvalidState("A sent review cannot be deleted")
    with log_context(module="review_service", action="delete_draft", actor_id=str(reviewer.id)):
        review_utils.delete_review(review, actor_id=reviewer.id)
        db.session.commit()


# --- Getters ---

def awaiting_review(reviewer: User) -> List[Paper]:
    return paper_utils.list_papers_awaiting_review(reviewer.id, actor_id=reviewer.id)


def assigned_papers(reviewer: User) -> List[Paper]:
    return paper_utils.list_papers(reviewer_id=reviewer.id, actor_id=reviewer.id)


def list_reviews(reviewer: User) -> List[Review]:
    return review_utils.list_reviews(reviewer_id=reviewer.id, actor_id=reviewer.id)


def list_sent_reviews(reviewer: User) -> List[Review]:
    return review_utils.list_reviews(reviewer_id=reviewer.id, sent_only=True, actor_id=reviewer.id)


def get_review(reviewer: User, review_id) -> Review:
    return _authored_review(reviewer, review_id)


def get_review_for_paper(reviewer: User, paper_id) -> Review:
    paper = _assigned_paper(reviewer, paper_id)
    review = review_utils.find_review(paper.id, reviewer.id)
    if review is None:
        raise NotFound("No review for this paper yet")
    return review


def get_assigned_paper(reviewer: User, paper_id) -> Paper:
    return _assigned_paper(reviewer, paper_id)


def list_admins() -> List[User]:
    return user_utils.list_users(role=Role.ADMIN, status=UserStatus.ACTIVE)


def contact_admin(reviewer: User, subject: str, message: str, admin_id=None) -> int:
    if not (subject or "").strip() or not (message or "").strip():
        raise ValidationError("Subject and message are required")
    if admin_id:
        admin = user_utils.get_user_by_id(admin_id)
        if admin is None or admin.role != Role.ADMIN:
            raise NotFound("Admin not found")
        admins = [admin]
    else:
        admins = list_admins()
    if not admins:
        raise NotFound("No administrator is available")
    return notifications.contact_admins(reviewer, admins, subject.strip(), message.strip())
