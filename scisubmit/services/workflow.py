"""Paper lifecycle as a declared transition table.

Every status change goes through :func:`apply_transition`; anything not listed
in :data:`TRANSITIONS` is rejected with :class:`InvalidState`.
"""

from typing import Dict, Optional, Tuple

from scisubmit.errors import InvalidState
from scisubmit.models.enumerations import PaperEvent, PaperStatus, Recommendation
from scisubmit.utils.logging_utils import get_logger

logger = get_logger("paper")

TRANSITIONS: Dict[Tuple[PaperStatus, PaperEvent], PaperStatus] = {
    (PaperStatus.DRAFT, PaperEvent.FINALIZE): PaperStatus.SUBMITTED,
    (PaperStatus.DRAFT, PaperEvent.REOPEN): PaperStatus.DRAFT,
    (PaperStatus.SUBMITTED, PaperEvent.REOPEN): PaperStatus.DRAFT,
    (PaperStatus.SUBMITTED, PaperEvent.ASSIGN_REVIEWER): PaperStatus.UNDER_REVIEW,
    (PaperStatus.UNDER_REVIEW, PaperEvent.ASSIGN_REVIEWER): PaperStatus.UNDER_REVIEW,
    (PaperStatus.UNDER_REVIEW, PaperEvent.UNASSIGN_REVIEWER): PaperStatus.SUBMITTED,
    (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_PUBLISH): PaperStatus.ACCEPTED,
    (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_PUBLISH_WITH_CHANGES): PaperStatus.ACCEPTED_WITH_CHANGES,
    (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_REJECT): PaperStatus.REJECTED,
    (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_NO_DECISION): PaperStatus.UNDER_REVIEW,
    (PaperStatus.ACCEPTED_WITH_CHANGES, PaperEvent.RESUBMIT): PaperStatus.SUBMITTED_AFTER_REVIEW,
}

RECOMMENDATION_EVENTS: Dict[Recommendation, PaperEvent] = {
    Recommendation.PUBLISH: PaperEvent.REVIEW_PUBLISH,
    Recommendation.PUBLISH_WITH_CHANGES: PaperEvent.REVIEW_PUBLISH_WITH_CHANGES,
    Recommendation.REJECT: PaperEvent.REVIEW_REJECT,
}

# Statuses the owning participant may still edit.
PARTICIPANT_EDITABLE = frozenset({PaperStatus.DRAFT, PaperStatus.SUBMITTED, PaperStatus.ACCEPTED_WITH_CHANGES})


def event_for_recommendation(recommendation: Optional[Recommendation]) -> PaperEvent:
    if recommendation is None:
        return PaperEvent.REVIEW_NO_DECISION
    return RECOMMENDATION_EVENTS.get(Recommendation(recommendation), PaperEvent.REVIEW_NO_DECISION)


def status_for_recommendation(recommendation: Optional[Recommendation]) -> PaperStatus:
    """Status a paper under review ends up in once a review with ``recommendation`` is sent."""
    return TRANSITIONS[(PaperStatus.UNDER_REVIEW, event_for_recommendation(recommendation))]


def next_status(current: PaperStatus, event: PaperEvent) -> PaperStatus:
    try:
        return TRANSITIONS[(PaperStatus(current), PaperEvent(event))]
    except KeyError:
        raise InvalidState(
            f"Cannot {PaperEvent(event).value.replace('_', ' ')} a paper in status {PaperStatus(current).value}",
            details={"status": PaperStatus(current).value, "event": PaperEvent(event).value},
        ) from None


def can_apply(current: PaperStatus, event: PaperEvent) -> bool:
    return (PaperStatus(current), PaperEvent(event)) in TRANSITIONS


def apply_transition(paper, event: PaperEvent) -> PaperStatus:
    """Move ``paper`` along ``event``; the caller commits."""
    previous = paper.status
    target = next_status(previous, event)
    if target == PaperStatus.UNDER_REVIEW and paper.reviewer_id is None:
        raise InvalidState("A paper can only be under review with an assigned reviewer")
    paper.status = target
    logger.info("paper %s: %s --%s--> %s", paper.id, previous.value, PaperEvent(event).value, target.value)
    return target
