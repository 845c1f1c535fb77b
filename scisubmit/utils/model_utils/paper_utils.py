from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select

from scisubmit.extensions import db
from scisubmit.models.Paper import Paper, ReviewerAssignment
from scisubmit.models.Review import Review
from scisubmit.utils.logging_utils import get_logger, log_context

from .base import create_instance, delete_instance, get_instance, list_instances, update_instance

logger = get_logger("paper")


def create_paper(commit: bool = False, *, actor_id=None, context: Optional[Dict[str, Any]] = None, **attributes) -> Paper:
    with log_context(module="paper_utils", action="create_paper", actor_id=actor_id):
        paper = create_instance(Paper, commit=commit, flush=True, actor_id=actor_id, event_name="paper.create",
                                context=context, **attributes)
        logger.info("create_paper id=%s status=%s", paper.id, paper.status.value)
        return paper


def get_paper_by_id(paper_id, *, actor_id=None, context: Optional[Dict[str, Any]] = None) -> Optional[Paper]:
    return get_instance(Paper, paper_id, actor_id=actor_id, context=context)


def list_papers(*, user_id=None, reviewer_id=None, conference_id=None, category_id=None, status=None,
                actor_id=None, context: Optional[Dict[str, Any]] = None) -> List[Paper]:
    filters = []
    if user_id is not None:
        filters.append(Paper.user_id == user_id)
    if reviewer_id is not None:
        filters.append(Paper.reviewer_id == reviewer_id)
    if conference_id is not None:
        filters.append(Paper.conference_id == conference_id)
    if category_id is not None:
        filters.append(Paper.category_id == category_id)
    if status is not None:
        filters.append(Paper.status == status)
    return list_instances(Paper, filters=filters, order_by=Paper.submission_date.desc(),
                          actor_id=actor_id, context=context)


def list_papers_awaiting_review(reviewer_id, *, actor_id=None) -> List[Paper]:
    """Assigned to ``reviewer_id`` minus papers that reviewer already sent a review for."""
    reviewed = select(Review.paper_id).where(and_(Review.reviewer_id == reviewer_id, Review.is_draft.is_(False)))
    return list_instances(
        Paper,
        filters=[Paper.reviewer_id == reviewer_id, Paper.id.not_in(reviewed)],
        order_by=Paper.submission_date.asc(),
        actor_id=actor_id,
        context={"query": "awaiting_review"},
    )


def update_paper(paper: Paper, commit: bool = False, *, actor_id=None, event_name: Optional[str] = None,
                 **attributes) -> Paper:
    return update_instance(paper, commit=commit, actor_id=actor_id, event_name=event_name or "paper.update",
                           **attributes)


def delete_paper(paper: Paper, commit: bool = False, *, actor_id=None) -> None:
    with log_context(module="paper_utils", action="delete_paper", actor_id=actor_id):
        logger.info("delete_paper id=%s status=%s", paper.id, paper.status.value)
        delete_instance(paper, commit=commit, actor_id=actor_id, event_name="paper.delete")


def record_assignment(paper: Paper, reviewer_id, previous_reviewer_id, assigned_by_id) -> ReviewerAssignment:
    return create_instance(
        ReviewerAssignment,
        commit=False,
        actor_id=assigned_by_id,
        event_name="paper.assignment.create",
        paper_id=paper.id,
        reviewer_id=reviewer_id,
        previous_reviewer_id=previous_reviewer_id,
        assigned_by_id=assigned_by_id,
    )


def list_assignments(paper: Paper) -> List[ReviewerAssignment]:
    return list_instances(
        ReviewerAssignment,
        filters=[ReviewerAssignment.paper_id == paper.id],
        order_by=[ReviewerAssignment.assigned_at.asc(), ReviewerAssignment.id.asc()],
    )


def count_papers(**filters) -> int:
    query = db.session.query(Paper)
    for column, value in filters.items():
        query = query.filter(getattr(Paper, column) == value)
    return query.count()
