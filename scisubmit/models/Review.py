from datetime import datetime, timezone
import uuid

from sqlalchemy import Enum as SqlEnum, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from ..extensions import db
from scisubmit.models.enumerations import QuestionType, Recommendation


def _utcnow():
    return datetime.now(timezone.utc)


class Question(db.Model):
    __tablename__ = "questions"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    text = db.Column(db.Text, nullable=False)
    type = db.Column(SqlEnum(QuestionType, name="question_type"), nullable=False)
    # rating: {"min": 1, "max": 5}; yes_no / text: {}
    options = db.Column(db.JSON, nullable=False, default=dict)
    category = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class Review(db.Model):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("paper_id", "reviewer_id", name="uq_review_paper_reviewer"),
    )

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    paper_id = db.Column(UUID(as_uuid=True), db.ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True)
    paper = db.relationship("Paper", back_populates="reviews")

    reviewer_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer = db.relationship("User", foreign_keys=[reviewer_id])

    comments = db.Column(db.Text, nullable=True)
    recommendation = db.Column(SqlEnum(Recommendation, name="recommendation"), nullable=True)
    is_draft = db.Column(db.Boolean, nullable=False, default=True)
    sent_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    responses = db.relationship(
        "ReviewResponse",
        back_populates="review",
        cascade="all, delete-orphan",
        lazy=True,
    )


class ReviewResponse(db.Model):
    __tablename__ = "review_responses"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    review_id = db.Column(UUID(as_uuid=True), db.ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    review = db.relationship("Review", back_populates="responses")

    # Referenced by id; once answered, a question keeps its type and options.
    question_id = db.Column(UUID(as_uuid=True), db.ForeignKey("questions.id", ondelete="SET NULL"), nullable=True)
    question = db.relationship("Question")

    answer = db.Column(db.JSON, nullable=True)
