from datetime import datetime, timezone
import uuid

from sqlalchemy import CheckConstraint, Enum as SqlEnum
from sqlalchemy.dialects.postgresql import UUID

from ..extensions import db
from scisubmit.models.enumerations import ConferenceStatus


def _utcnow():
    return datetime.now(timezone.utc)


class Conference(db.Model):
    __tablename__ = "conferences"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_conference_dates"),
    )

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    year = db.Column(db.Integer, nullable=False)
    location = db.Column(db.String(200), nullable=False)
    university = db.Column(db.String(200), nullable=False)

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    # Deadlines are whole days; the named day is still open.
    deadline_submission = db.Column(db.Date, nullable=False)
    submission_confirmation = db.Column(db.Date, nullable=False)
    deadline_review = db.Column(db.Date, nullable=False)
    deadline_correction = db.Column(db.Date, nullable=False)

    status = db.Column(
        SqlEnum(ConferenceStatus, name="conference_status"),
        nullable=False,
        default=ConferenceStatus.UPCOMING,
    )

    created_by_id = db.Column(UUID(as_uuid=True), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by = db.relationship("User", foreign_keys=[created_by_id])

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    papers = db.relationship("Paper", back_populates="conference", lazy=True)

    @property
    def label(self) -> str:
        return f"{self.year} {self.location}"


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(120), nullable=False, unique=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    papers = db.relationship("Paper", back_populates="category", lazy=True)
