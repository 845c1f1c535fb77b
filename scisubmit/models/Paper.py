from datetime import datetime, timezone
import uuid

from sqlalchemy import Enum as SqlEnum, and_
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import validates

from ..extensions import db
from scisubmit.models.enumerations import PaperStatus


def _utcnow():
    return datetime.now(timezone.utc)


class Paper(db.Model):
    __tablename__ = "papers"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(300), nullable=False)
    abstract = db.Column(db.Text, nullable=False)
    keywords = db.Column(db.JSON, nullable=False, default=list)
    # [{"first_name": ..., "last_name": ...}, ...]
    authors = db.Column(db.JSON, nullable=False, default=list)

    user_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user = db.relationship("User", back_populates="papers", foreign_keys=[user_id])

    conference_id = db.Column(UUID(as_uuid=True), db.ForeignKey("conferences.id"), nullable=False, index=True)
    conference = db.relationship("Conference", back_populates="papers")

    category_id = db.Column(UUID(as_uuid=True), db.ForeignKey("categories.id"), nullable=False)
    category = db.relationship("Category", back_populates="papers")

    reviewer_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    reviewer = db.relationship("User", foreign_keys=[reviewer_id])

    file_path = db.Column(db.String(500), nullable=False)
    submission_date = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    deadline_date = db.Column(db.Date, nullable=False)

    status = db.Column(SqlEnum(PaperStatus, name="paper_status"), nullable=False, default=PaperStatus.DRAFT)
    awarded = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    reviews = db.relationship("Review", back_populates="paper", cascade="all, delete-orphan", lazy=True)
    # The sent review, if any. At most one exists per paper.
    review = db.relationship(
        "Review",
        primaryjoin=lambda: and_(Paper.id == Review.paper_id, Review.is_draft.is_(False)),
        uselist=False,
        viewonly=True,
    )
    assignments = db.relationship(
        "ReviewerAssignment",
        back_populates="paper",
        cascade="all, delete-orphan",
        order_by="ReviewerAssignment.assigned_at",
        lazy=True,
    )

    @validates("keywords")
    def _normalize_keywords(self, key, value):
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in (value or []) if str(item).strip()]


class ReviewerAssignment(db.Model):
    """Append-only history of reviewer assignments for a paper."""

    __tablename__ = "reviewer_assignments"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    paper_id = db.Column(UUID(as_uuid=True), db.ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True)
    paper = db.relationship("Paper", back_populates="assignments")

    reviewer_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    previous_reviewer_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_by_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    reviewer = db.relationship("User", foreign_keys=[reviewer_id])
    previous_reviewer = db.relationship("User", foreign_keys=[previous_reviewer_id])
    assigned_by = db.relationship("User", foreign_keys=[assigned_by_id])


from scisubmit.models.Review import Review  # noqa: E402
