from datetime import date

import pytest

from scisubmit.errors import (
    ConferenceNotOngoing,
    DeadlineExpired,
    Forbidden,
    InvalidState,
    NotOwner,
    ValidationError,
)
from scisubmit.models.enumerations import PaperStatus, Recommendation, Role
from scisubmit.services import catalog_service, conference_service, paper_service, review_service
from scisubmit.services.file_store import get_file_store
from scisubmit.services.paper_service import Upload

from conftest import CONFERENCE_DATA, PDF_BYTES


def _accept_with_changes(reviewer, paper):
    review = review_service.create_or_update_draft(
        reviewer, paper.id, recommendation=Recommendation.PUBLISH_WITH_CHANGES, comments="Fix section 2",
    )
    review_service.send(reviewer, review.id)
    return paper


class TestSubmit:
    """Participants submit a paper with a file into an ongoing conference."""

    def test_final_submission(self, submit_paper, participant, conference):
        paper = submit_paper()
        assert paper.status == PaperStatus.SUBMITTED
        assert paper.user_id == participant.id
        assert paper.deadline_date == conference.deadline_submission
        assert paper.keywords == ["graphs", "heuristics"]
        assert get_file_store().exists(paper.file_path)

    def test_draft_submission(self, submit_paper):
        assert submit_paper(is_final=False).status == PaperStatus.DRAFT

    def test_deadline_day_is_still_open(self, submit_paper, clock):
        clock.set_date(date(2025, 3, 20))
        assert submit_paper().status == PaperStatus.SUBMITTED

    def test_day_after_deadline_is_closed(self, submit_paper, clock):
        clock.set_date(date(2025, 3, 21))
        with pytest.raises(DeadlineExpired):
            submit_paper()

    def test_conference_must_be_ongoing(self, admin, submit_paper):
        upcoming = conference_service.create_conference(admin, dict(
            CONFERENCE_DATA,
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 3),
            deadline_submission=date(2025, 5, 1),
        ))
        with pytest.raises(ConferenceNotOngoing):
            submit_paper(conference_id=upcoming.id)

    def test_only_participants_submit(self, submit_paper, reviewer):
        with pytest.raises(Forbidden):
            submit_paper(owner=reviewer)

    def test_file_is_required(self, participant, paper_data):
        with pytest.raises(ValidationError) as excinfo:
            paper_service.submit(participant, dict(paper_data, is_final=True), None)
        assert "file" in excinfo.value.details

    def test_rejects_unknown_extension(self, submit_paper):
        with pytest.raises(ValidationError):
            submit_paper(filename="paper.exe")

    def test_rejects_inactive_category(self, admin, submit_paper, category):
        catalog_service.update_category(admin, category.id, {"is_active": False})
        with pytest.raises(ValidationError):
            submit_paper()

    def test_requires_an_author(self, submit_paper):
        with pytest.raises(ValidationError) as excinfo:
            submit_paper(authors=[])
        assert "authors" in excinfo.value.details


class TestEdit:

    def test_owner_edits_before_deadline(self, submit_paper, participant):
        paper = submit_paper()
        updated = paper_service.edit(participant, paper.id, {"title": "Better title"})
        assert updated.title == "Better title"
        assert updated.status == PaperStatus.SUBMITTED

    def test_protected_fields_are_ignored(self, submit_paper, participant, reviewer):
        paper = submit_paper()
        paper_service.edit(participant, paper.id, {
            "title": "Retitled",
            "status": PaperStatus.ACCEPTED.value,
            "awarded": True,
            "reviewer_id": reviewer.id,
            "deadline_date": date(2030, 1, 1),
        })
        assert paper.title == "Retitled"
        assert paper.status == PaperStatus.SUBMITTED
        assert paper.awarded is False
        assert paper.reviewer_id is None
        assert paper.deadline_date == date(2025, 3, 20)

    def test_other_participant_cannot_edit(self, submit_paper, create_user):
        paper = submit_paper()
        stranger = create_user(role=Role.PARTICIPANT)
        with pytest.raises(NotOwner):
            paper_service.edit(stranger, paper.id, {"title": "Mine now"})

    def test_edit_after_deadline_fails(self, submit_paper, participant, clock):
        paper = submit_paper()
        clock.set_date(date(2025, 3, 21))
        with pytest.raises(DeadlineExpired):
            paper_service.edit(participant, paper.id, {"title": "Late"})

    def test_paper_under_review_is_locked(self, paper_under_review, participant):
        with pytest.raises(InvalidState):
            paper_service.edit(participant, paper_under_review.id, {"title": "Sneaky"})

    def test_finalize_draft(self, submit_paper, participant):
        paper = submit_paper(is_final=False)
        paper_service.edit(participant, paper.id, {"is_final": True})
        assert paper.status == PaperStatus.SUBMITTED

    def test_new_file_replaces_old(self, submit_paper, participant):
        paper = submit_paper()
        old_path = paper.file_path
        paper_service.edit(participant, paper.id, {}, Upload(b"%PDF-1.4 v2", "v2.pdf"))
        store = get_file_store()
        assert paper.file_path != old_path
        assert store.exists(paper.file_path)
        assert not store.exists(old_path)

    def test_correction_resubmits(self, paper_under_review, participant, reviewer, clock):
        _accept_with_changes(reviewer, paper_under_review)
        assert paper_under_review.status == PaperStatus.ACCEPTED_WITH_CHANGES

        # Past the submission deadline but inside the correction window.
        clock.set_date(date(2025, 3, 28))
        paper_service.edit(participant, paper_under_review.id, {}, Upload(PDF_BYTES, "fixed.pdf"))
        assert paper_under_review.status == PaperStatus.SUBMITTED_AFTER_REVIEW

    def test_correction_after_deadline_fails(self, paper_under_review, participant, reviewer, clock):
        _accept_with_changes(reviewer, paper_under_review)
        clock.set_date(date(2025, 3, 29))
        with pytest.raises(DeadlineExpired):
            paper_service.edit(participant, paper_under_review.id, {}, Upload(PDF_BYTES, "fixed.pdf"))


class TestDelete:

    def test_draft_is_deleted_with_its_file(self, submit_paper, participant):
        paper = submit_paper(is_final=False)
        path = paper.file_path
        paper_service.delete(participant, paper.id)
        assert paper_service.my_papers(participant) == []
        assert not get_file_store().exists(path)

    def test_submitted_paper_cannot_be_deleted(self, submit_paper, participant):
        paper = submit_paper()
        with pytest.raises(InvalidState):
            paper_service.delete(participant, paper.id)


class TestFileAccess:

    def test_owner_admin_and_assigned_reviewer(self, paper_under_review, participant, admin, reviewer):
        for user in (participant, admin, reviewer):
            path, name = paper_service.file_for(user, paper_under_review.id)
            assert name == "paper.pdf"
            with open(path, "rb") as handle:
                assert handle.read() == PDF_BYTES

    def test_other_reviewer_is_refused(self, paper_under_review, create_user):
        other = create_user(role=Role.REVIEWER)
        with pytest.raises(Forbidden):
            paper_service.file_for(other, paper_under_review.id)


class TestAdminLifecycle:

    def test_assign_records_history_and_notifies(self, admin, reviewer, create_user, submit_paper, sent_mails):
        paper = submit_paper()
        paper_service.assign_reviewer(admin, paper.id, reviewer.id)
        assert paper.status == PaperStatus.UNDER_REVIEW
        assert sent_mails[-1]["to"] == reviewer.email

        second = create_user(role=Role.REVIEWER)
        paper_service.assign_reviewer(admin, paper.id, second.id)
        assert paper.reviewer_id == second.id
        assert paper.status == PaperStatus.UNDER_REVIEW

        history = paper_service.assignment_history(paper.id)
        assert [row.reviewer_id for row in history] == [reviewer.id, second.id]
        assert history[1].previous_reviewer_id == reviewer.id
        assert history[1].assigned_by_id == admin.id

    def test_no_reassignment_after_review_without_decision(self, admin, reviewer, create_user, paper_under_review):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id, comments="Undecided")
        review_service.send(reviewer, review.id)
        assert paper_under_review.status == PaperStatus.UNDER_REVIEW

        second = create_user(role=Role.REVIEWER)
        with pytest.raises(InvalidState):
            paper_service.assign_reviewer(admin, paper_under_review.id, second.id)
        assert paper_under_review.reviewer_id == reviewer.id
        assert len(paper_service.assignment_history(paper_under_review.id)) == 1

    def test_assign_requires_reviewer_role(self, admin, participant, submit_paper):
        paper = submit_paper()
        with pytest.raises(ValidationError):
            paper_service.assign_reviewer(admin, paper.id, participant.id)

    def test_assign_rejects_draft(self, admin, reviewer, submit_paper):
        paper = submit_paper(is_final=False)
        with pytest.raises(InvalidState):
            paper_service.assign_reviewer(admin, paper.id, reviewer.id)
        assert paper.reviewer_id is None

    def test_reopen_returns_to_draft(self, admin, participant, submit_paper, sent_mails, clock):
        paper = submit_paper()
        paper_service.reopen(admin, paper.id, date(2025, 4, 15))
        assert paper.status == PaperStatus.DRAFT
        assert paper.deadline_date == date(2025, 4, 15)
        assert sent_mails[-1]["to"] == participant.email

        # The new per-paper deadline applies to edits.
        clock.set_date(date(2025, 4, 10))
        paper_service.edit(participant, paper.id, {"title": "Extended"})
        assert paper.title == "Extended"

    def test_reopen_under_review_is_refused(self, admin, paper_under_review):
        with pytest.raises(InvalidState):
            paper_service.reopen(admin, paper_under_review.id, date(2025, 4, 15))

    def test_award_only_accepted(self, admin, reviewer, paper_under_review):
        with pytest.raises(InvalidState):
            paper_service.admin_update(admin, paper_under_review.id, {"awarded": True})

        review = review_service.create_or_update_draft(reviewer, paper_under_review.id,
                                                       recommendation=Recommendation.PUBLISH)
        review_service.send(reviewer, review.id)
        paper_service.admin_update(admin, paper_under_review.id, {"awarded": True})
        assert paper_under_review.awarded is True

    def test_admin_update_authors(self, admin, submit_paper):
        paper = submit_paper()
        authors = [{"first_name": "Eva", "last_name": "Kovac"}, {"first_name": "Ivan", "last_name": "Horak"}]
        paper_service.admin_update(admin, paper.id, {"authors": authors})
        assert paper.authors == authors

    def test_admin_delete_any_status(self, admin, paper_under_review):
        path = paper_under_review.file_path
        paper_service.admin_delete(admin, paper_under_review.id)
        assert paper_service.list_papers() == []
        assert not get_file_store().exists(path)

    def test_list_filters(self, admin, submit_paper, conference):
        draft = submit_paper(is_final=False)
        final = submit_paper(title="Second paper")
        assert {p.id for p in paper_service.list_papers(conference_id=conference.id)} == {draft.id, final.id}
        assert [p.id for p in paper_service.list_papers(status=PaperStatus.DRAFT)] == [draft.id]
