from types import SimpleNamespace

import pytest

from scisubmit.errors import InvalidState
from scisubmit.models.enumerations import PaperEvent, PaperStatus, Recommendation
from scisubmit.services import workflow


def _paper(status, reviewer_id="r-1"):
    return SimpleNamespace(id="p-1", status=status, reviewer_id=reviewer_id)


class TestTransitionTable:
    """The lifecycle table is the only source of status changes."""

    @pytest.mark.parametrize("current, event, expected", [
        (PaperStatus.DRAFT, PaperEvent.FINALIZE, PaperStatus.SUBMITTED),
        (PaperStatus.DRAFT, PaperEvent.REOPEN, PaperStatus.DRAFT),
        (PaperStatus.SUBMITTED, PaperEvent.REOPEN, PaperStatus.DRAFT),
        (PaperStatus.SUBMITTED, PaperEvent.ASSIGN_REVIEWER, PaperStatus.UNDER_REVIEW),
        (PaperStatus.UNDER_REVIEW, PaperEvent.ASSIGN_REVIEWER, PaperStatus.UNDER_REVIEW),
        (PaperStatus.UNDER_REVIEW, PaperEvent.UNASSIGN_REVIEWER, PaperStatus.SUBMITTED),
        (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_PUBLISH, PaperStatus.ACCEPTED),
        (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_PUBLISH_WITH_CHANGES, PaperStatus.ACCEPTED_WITH_CHANGES),
        (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_REJECT, PaperStatus.REJECTED),
        (PaperStatus.UNDER_REVIEW, PaperEvent.REVIEW_NO_DECISION, PaperStatus.UNDER_REVIEW),
        (PaperStatus.ACCEPTED_WITH_CHANGES, PaperEvent.RESUBMIT, PaperStatus.SUBMITTED_AFTER_REVIEW),
    ])
    def test_allowed_transitions(self, current, event, expected):
        assert workflow.next_status(current, event) == expected
        assert workflow.can_apply(current, event)

    @pytest.mark.parametrize("current, event", [
        (PaperStatus.DRAFT, PaperEvent.ASSIGN_REVIEWER),
        (PaperStatus.SUBMITTED, PaperEvent.FINALIZE),
        (PaperStatus.ACCEPTED, PaperEvent.REOPEN),
        (PaperStatus.REJECTED, PaperEvent.ASSIGN_REVIEWER),
        (PaperStatus.SUBMITTED_AFTER_REVIEW, PaperEvent.RESUBMIT),
        (PaperStatus.UNDER_REVIEW, PaperEvent.REOPEN),
        (PaperStatus.ACCEPTED_WITH_CHANGES, PaperEvent.REVIEW_PUBLISH),
    ])
    def test_rejected_transitions(self, current, event):
        assert not workflow.can_apply(current, event)
        with pytest.raises(InvalidState) as excinfo:
            workflow.next_status(current, event)
        assert excinfo.value.details == {"status": current.value, "event": event.value}

    def test_terminal_statuses_have_no_exit(self):
        terminal = {PaperStatus.ACCEPTED, PaperStatus.REJECTED, PaperStatus.SUBMITTED_AFTER_REVIEW}
        assert not [key for key in workflow.TRANSITIONS if key[0] in terminal]


class TestRecommendations:

    @pytest.mark.parametrize("recommendation, status", [
        (Recommendation.PUBLISH, PaperStatus.ACCEPTED),
        (Recommendation.PUBLISH_WITH_CHANGES, PaperStatus.ACCEPTED_WITH_CHANGES),
        (Recommendation.REJECT, PaperStatus.REJECTED),
        (None, PaperStatus.UNDER_REVIEW),
    ])
    def test_status_for_recommendation(self, recommendation, status):
        assert workflow.status_for_recommendation(recommendation) == status

    def test_raw_values_are_accepted(self):
        assert workflow.event_for_recommendation("Publikovať_so_zmenami") == PaperEvent.REVIEW_PUBLISH_WITH_CHANGES


class TestApplyTransition:

    def test_moves_the_paper(self):
        paper = _paper(PaperStatus.DRAFT)
        assert workflow.apply_transition(paper, PaperEvent.FINALIZE) == PaperStatus.SUBMITTED
        assert paper.status == PaperStatus.SUBMITTED

    def test_under_review_requires_reviewer(self):
        paper = _paper(PaperStatus.SUBMITTED, reviewer_id=None)
        with pytest.raises(InvalidState):
            workflow.apply_transition(paper, PaperEvent.ASSIGN_REVIEWER)
        assert paper.status == PaperStatus.SUBMITTED

    def test_invalid_event_leaves_status(self):
        paper = _paper(PaperStatus.ACCEPTED)
        with pytest.raises(InvalidState):
            workflow.apply_transition(paper, PaperEvent.RESUBMIT)
        assert paper.status == PaperStatus.ACCEPTED
