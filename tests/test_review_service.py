import uuid
from datetime import date

import pytest

from scisubmit.errors import (
    AlreadySent,
    Conflict,
    Forbidden,
    InvalidState,
    NotFound,
    ReviewDeadlineExpired,
    ValidationError,
)
from scisubmit.models import Review, ReviewResponse
from scisubmit.models.enumerations import PaperStatus, QuestionType, Recommendation, Role
from scisubmit.services import catalog_service, paper_service, review_service, user_service


@pytest.fixture
def questions(admin):
    return {
        "rating": catalog_service.create_question(admin, {
            "text": "Originality", "type": "rating", "options": {"min": 1, "max": 6},
        }),
        "yes_no": catalog_service.create_question(admin, {"text": "Is the topic relevant?", "type": "yes_no"}),
        "text": catalog_service.create_question(admin, {"text": "Main weaknesses", "type": "text"}),
    }


@pytest.fixture
def answers(questions):
    return [
        {"question_id": str(questions["rating"].id), "answer": 5},
        {"question_id": str(questions["yes_no"].id), "answer": True},
        {"question_id": str(questions["text"].id), "answer": "Evaluation is thin."},
    ]


class TestDrafts:
    """A reviewer keeps one rewritable draft per assigned paper."""

    def test_create_and_rewrite(self, reviewer, paper_under_review, answers):
        review = review_service.create_or_update_draft(
            reviewer, paper_under_review.id, responses=answers, recommendation=Recommendation.PUBLISH,
        )
        assert review.is_draft is True
        assert len(review.responses) == 3

        again = review_service.update_draft(reviewer, review.id, responses=answers[:1], comments="Shorter")
        assert again.id == review.id
        assert len(again.responses) == 1
        assert again.comments == "Shorter"
        assert again.recommendation is None

    def test_recommendation_accepts_stored_value(self, reviewer, paper_under_review):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id, recommendation="Odmietnuť")
        assert review.recommendation == Recommendation.REJECT

    def test_unknown_recommendation(self, reviewer, paper_under_review):
        with pytest.raises(ValidationError):
            review_service.create_or_update_draft(reviewer, paper_under_review.id, recommendation="maybe")

    @pytest.mark.parametrize("kind, answer", [
        ("rating", 7),
        ("rating", 0),
        ("rating", "five"),
        ("yes_no", "yes"),
        ("text", 3),
    ])
    def test_answer_must_fit_question(self, reviewer, paper_under_review, questions, kind, answer):
        responses = [{"question_id": str(questions[kind].id), "answer": answer}]
        with pytest.raises(ValidationError) as excinfo:
            review_service.create_or_update_draft(reviewer, paper_under_review.id, responses=responses)
        assert "0" in excinfo.value.details

    def test_unknown_question(self, reviewer, paper_under_review):
        responses = [{"question_id": str(uuid.uuid4()), "answer": "x"}]
        with pytest.raises(ValidationError):
            review_service.create_or_update_draft(reviewer, paper_under_review.id, responses=responses)

    def test_question_answered_twice(self, reviewer, paper_under_review, answers):
        with pytest.raises(ValidationError):
            review_service.create_or_update_draft(reviewer, paper_under_review.id, responses=answers + answers[:1])

    def test_unassigned_reviewer_is_refused(self, create_user, paper_under_review):
        other = create_user(role=Role.REVIEWER)
        with pytest.raises(Forbidden):
            review_service.create_or_update_draft(other, paper_under_review.id)

    def test_participant_cannot_review(self, participant, paper_under_review):
        with pytest.raises(Forbidden):
            review_service.create_or_update_draft(participant, paper_under_review.id)

    def test_review_deadline(self, reviewer, paper_under_review, clock):
        clock.set_date(date(2025, 3, 25))
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id)
        clock.set_date(date(2025, 3, 26))
        with pytest.raises(ReviewDeadlineExpired):
            review_service.update_draft(reviewer, review.id, comments="late")

    def test_no_draft_row_after_review_deadline(self, reviewer, paper_under_review, answers, clock):
        clock.set_date(date(2025, 3, 26))
        with pytest.raises(ReviewDeadlineExpired):
            review_service.create_or_update_draft(
                reviewer, paper_under_review.id, responses=answers, recommendation=Recommendation.PUBLISH,
            )
        assert Review.query.count() == 0
        assert ReviewResponse.query.count() == 0

    def test_delete_draft(self, reviewer, paper_under_review):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id)
        review_service.delete_draft(reviewer, review.id)
        with pytest.raises(NotFound):
            review_service.get_review(reviewer, review.id)
        assert paper_under_review.status == PaperStatus.UNDER_REVIEW


class TestSend:

    @pytest.mark.parametrize("recommendation, status", [
        (Recommendation.PUBLISH, PaperStatus.ACCEPTED),
        (Recommendation.PUBLISH_WITH_CHANGES, PaperStatus.ACCEPTED_WITH_CHANGES),
        (Recommendation.REJECT, PaperStatus.REJECTED),
        (None, PaperStatus.UNDER_REVIEW),
    ])
    def test_send_moves_paper(self, reviewer, participant, paper_under_review, sent_mails, recommendation, status):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id, recommendation=recommendation)
        sent = review_service.send(reviewer, review.id)

        assert sent.is_draft is False
        assert sent.sent_at is not None
        assert paper_under_review.status == status
        assert paper_under_review.review.id == review.id
        assert sent_mails[-1]["to"] == participant.email

    def test_sent_review_is_final(self, reviewer, paper_under_review):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id,
                                                       recommendation=Recommendation.PUBLISH)
        review_service.send(reviewer, review.id)

        with pytest.raises(AlreadySent):
            review_service.send(reviewer, review.id)
        with pytest.raises(AlreadySent):
            review_service.update_draft(reviewer, review.id, comments="second thoughts")
        with pytest.raises(AlreadySent):
            review_service.create_or_update_draft(reviewer, paper_under_review.id)
        with pytest.raises(InvalidState):
            review_service.delete_draft(reviewer, review.id)

    def test_send_after_deadline(self, reviewer, paper_under_review, clock):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id)
        clock.set_date(date(2025, 3, 26))
        with pytest.raises(ReviewDeadlineExpired):
            review_service.send(reviewer, review.id)
        assert review.is_draft is True

    def test_only_author_sends(self, reviewer, create_user, paper_under_review):
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id)
        with pytest.raises(Forbidden):
            review_service.send(create_user(role=Role.REVIEWER), review.id)

    def test_awaiting_list_drops_reviewed_papers(self, reviewer, paper_under_review):
        assert [p.id for p in review_service.awaiting_review(reviewer)] == [paper_under_review.id]
        review = review_service.create_or_update_draft(reviewer, paper_under_review.id,
                                                       recommendation=Recommendation.REJECT)
        review_service.send(reviewer, review.id)
        assert review_service.awaiting_review(reviewer) == []
        assert [p.id for p in review_service.assigned_papers(reviewer)] == [paper_under_review.id]
        assert [r.id for r in review_service.list_sent_reviews(reviewer)] == [review.id]


class TestAnsweredQuestions:
    """Once answered, a question keeps the type and options its answers were checked against."""

    @pytest.fixture
    def sent_review(self, reviewer, paper_under_review, answers):
        review = review_service.create_or_update_draft(
            reviewer, paper_under_review.id, responses=answers, recommendation=Recommendation.PUBLISH,
        )
        return review_service.send(reviewer, review.id)

    @pytest.mark.parametrize("change", [
        {"type": "yes_no"},
        {"options": {"min": 1, "max": 3}},
        {"type": "text", "options": {}},
    ])
    def test_shape_is_locked(self, admin, questions, sent_review, change):
        rating = questions["rating"]
        with pytest.raises(Conflict):
            catalog_service.update_question(admin, rating.id, change)
        assert rating.type == QuestionType.RATING
        assert rating.options == {"min": 1, "max": 6}

    def test_text_and_category_stay_editable(self, admin, questions, sent_review):
        rating = questions["rating"]
        updated = catalog_service.update_question(admin, rating.id, {
            "text": "Originality of the contribution", "category": "content", "options": {"min": 1, "max": 6},
        })
        assert updated.text == "Originality of the contribution"
        assert updated.category == "content"
        assert updated.options == {"min": 1, "max": 6}

    def test_unanswered_question_can_change_type(self, admin, sent_review):
        fresh = catalog_service.create_question(admin, {"text": "Clarity", "type": "rating"})
        updated = catalog_service.update_question(admin, fresh.id, {"type": "yes_no"})
        assert updated.type == QuestionType.YES_NO


class TestReviewerRemoval:

    def test_deleting_reviewer_releases_papers(self, admin, reviewer, paper_under_review):
        review_service.create_or_update_draft(reviewer, paper_under_review.id)
        user_service.delete_user(admin, reviewer.id)

        paper = paper_service.get_paper(paper_under_review.id)
        assert paper.reviewer_id is None
        assert paper.status == PaperStatus.SUBMITTED
        assert paper.reviews == []


class TestContactAdmin:

    def test_message_reaches_every_admin(self, reviewer, admin, create_user, sent_mails):
        second = create_user(role=Role.ADMIN)
        delivered = review_service.contact_admin(reviewer, "Question", "Can I get more time?")
        assert delivered == 2
        assert {mail["to"] for mail in sent_mails} == {admin.email, second.email}
        assert "Can I get more time?" in sent_mails[0]["body"]

    def test_single_admin(self, reviewer, admin, create_user, sent_mails):
        create_user(role=Role.ADMIN)
        assert review_service.contact_admin(reviewer, "Hi", "Just you", admin_id=str(admin.id)) == 1
        assert [mail["to"] for mail in sent_mails] == [admin.email]

    def test_empty_message(self, reviewer, admin):
        with pytest.raises(ValidationError):
            review_service.contact_admin(reviewer, "Subject", "   ")
