from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from scisubmit.errors import Conflict, NotFound, ValidationError
from scisubmit.extensions import db
from scisubmit.models.Conference import Conference
from scisubmit.models.enumerations import ConferenceStatus
from scisubmit.utils.clock import get_clock
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.model_utils import conference_utils, paper_utils

logger = get_logger("conference")

DEADLINE_FIELDS = ("deadline_submission", "submission_confirmation", "deadline_review", "deadline_correction")
EDITABLE_FIELDS = ("year", "location", "university", "start_date", "end_date", "status") + DEADLINE_FIELDS
MIN_YEAR = 2000


def compute_status(conference: Conference, today: date) -> ConferenceStatus:
    """Status implied by the conference dates on ``today``; canceled is sticky."""
    if conference.status == ConferenceStatus.CANCELED:
        return ConferenceStatus.CANCELED
    return _status_from_dates(conference.start_date, conference.end_date, today)


def _status_from_dates(start: date, end: date, today: date) -> ConferenceStatus:
    if today < start:
        return ConferenceStatus.UPCOMING
    if today <= end:
        return ConferenceStatus.ONGOING
    return ConferenceStatus.COMPLETED


def refresh_conference_statuses(today: Optional[date] = None) -> int:
    """Recompute every conference status; returns how many rows changed."""
    today = today or get_clock().today()
    changed = 0
    with log_context(module="conference_scheduler", action="refresh", day=today.isoformat()):
        for conference in Conference.query.all():
            status = compute_status(conference, today)
            if status != conference.status:
                logger.info("conference %s: %s -> %s", conference.id, conference.status.value, status.value)
                conference.status = status
                changed += 1
        db.session.commit()
        logger.info("conference status refresh done, changed=%s", changed)
    return changed


def _validate(values: Dict[str, Any]) -> None:
    errors: Dict[str, str] = {}
    year = values.get("year")
    max_year = get_clock().today().year + 5
    if year is None or not MIN_YEAR <= int(year) <= max_year:
        errors["year"] = f"Year must be between {MIN_YEAR} and {max_year}"
    for field in ("location", "university"):
        if not (values.get(field) or "").strip():
            errors[field] = "Required"
    for field in ("start_date", "end_date") + DEADLINE_FIELDS:
        if not isinstance(values.get(field), date):
            errors[field] = "A date is required"
    start, end = values.get("start_date"), values.get("end_date")
    if isinstance(start, date) and isinstance(end, date) and start > end:
        errors["end_date"] = "End date must not be before start date"
    if errors:
        raise ValidationError("Invalid conference data", details=errors)


def get_conference(conference_id) -> Conference:
    conference = conference_utils.get_conference_by_id(conference_id)
    if conference is None:
        raise NotFound("Conference not found")
    return conference


def list_conferences(status: Optional[ConferenceStatus] = None) -> List[Conference]:
    return conference_utils.list_conferences(status=status)


def list_ongoing() -> List[Conference]:
    return conference_utils.list_conferences(status=ConferenceStatus.ONGOING)


def create_conference(admin, data: Dict[str, Any]) -> Conference:
    values = {key: data.get(key) for key in EDITABLE_FIELDS}
    _validate(values)
    with log_context(module="conference_service", action="create", actor_id=str(admin.id)):
        if values.get("status") != ConferenceStatus.CANCELED:
            values["status"] = _status_from_dates(values["start_date"], values["end_date"], get_clock().today())
        return conference_utils.create_conference(actor_id=admin.id, created_by_id=admin.id, **values)


def update_conference(admin, conference_id, data: Dict[str, Any]) -> Conference:
    conference = get_conference(conference_id)
    changes = {key: data[key] for key in EDITABLE_FIELDS if key in data}
    merged = {key: changes.get(key, getattr(conference, key)) for key in EDITABLE_FIELDS}
    _validate(merged)
    requested = changes.pop("status", None)
    with log_context(module="conference_service", action="update", actor_id=str(admin.id)):
        for key, value in changes.items():
            setattr(conference, key, value)
        if requested == ConferenceStatus.CANCELED:
            status = ConferenceStatus.CANCELED
        elif requested is None and conference.status == ConferenceStatus.CANCELED:
            status = ConferenceStatus.CANCELED
        else:
            # Any other explicit status un-cancels; the dates decide which one.
            status = _status_from_dates(conference.start_date, conference.end_date, get_clock().today())
        return conference_utils.update_conference(conference, actor_id=admin.id, status=status)


def delete_conference(admin, conference_id) -> None:
    conference = get_conference(conference_id)
    if paper_utils.count_papers(conference_id=conference.id):
        raise Conflict("Conference has papers and cannot be deleted")
    conference_utils.delete_conference(conference, actor_id=admin.id)
