"""Role-targeted emails. Delivery problems are logged and never raised."""

from typing import Iterable, Optional

from flask import current_app

from scisubmit.models.enumerations import PaperStatus
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.services.mail import send_mail

logger = get_logger("mail")

STATUS_LABELS = {
    PaperStatus.DRAFT: "Draft",
    PaperStatus.SUBMITTED: "Submitted",
    PaperStatus.UNDER_REVIEW: "Under review",
    PaperStatus.ACCEPTED_WITH_CHANGES: "Accepted with changes",
    PaperStatus.SUBMITTED_AFTER_REVIEW: "Submitted after review",
    PaperStatus.ACCEPTED: "Accepted",
    PaperStatus.REJECTED: "Rejected",
}


def notify(to: Optional[str], subject: str, body: str) -> bool:
    """Fire-and-forget send; returns whether the transport reported success."""
    with log_context(module="notifications", recipient=to):
        try:
            status = send_mail(to, subject, body)
        except Exception:
            logger.exception("notification to %s failed subject=%r", to, subject)
            return False
        if not 200 <= int(status or 0) < 300:
            logger.warning("notification to %s not delivered status=%s subject=%r", to, status, subject)
            return False
        return True


def _app_name() -> str:
    return current_app.config.get("APP_NAME", "SciSubmit")


def _frontend(path: str) -> str:
    return current_app.config.get("FRONTEND_BASE_URL", "").rstrip("/") + path


def reviewer_assigned(reviewer, paper) -> bool:
    conference = paper.conference
    body = (
        f"Hello {reviewer.full_name},\n\n"
        f"you have been assigned to review the paper \"{paper.title}\""
        f" for the {conference.year} conference in {conference.location}.\n"
        f"Reviews are accepted until {conference.deadline_review.isoformat()}.\n\n"
        f"{_app_name()}"
    )
    return notify(reviewer.email, f"{_app_name()}: new paper to review", body)


def review_decision(participant, paper) -> bool:
    label = STATUS_LABELS.get(paper.status, paper.status.value)
    body = (
        f"Hello {participant.full_name},\n\n"
        f"the review of your paper \"{paper.title}\" is complete.\n"
        f"New status: {label}.\n"
    )
    if paper.status == PaperStatus.ACCEPTED_WITH_CHANGES:
        body += f"Please upload the corrected version by {paper.conference.deadline_correction.isoformat()}.\n"
    body += f"\n{_app_name()}"
    return notify(participant.email, f"{_app_name()}: review result for \"{paper.title}\"", body)


def deadline_reset(participant, paper) -> bool:
    body = (
        f"Hello {participant.full_name},\n\n"
        f"your paper \"{paper.title}\" was returned to draft so you can update it.\n"
        f"New submission deadline: {paper.deadline_date.isoformat()}.\n\n"
        f"{_app_name()}"
    )
    return notify(participant.email, f"{_app_name()}: submission deadline changed", body)


def email_verification(user, token: str) -> bool:
    body = (
        f"Hello {user.full_name},\n\n"
        f"please confirm your email address: {_frontend('/verify-email/' + token)}\n\n"
        f"{_app_name()}"
    )
    return notify(user.email, f"{_app_name()}: confirm your email", body)


def password_reset(user, token: str) -> bool:
    body = (
        f"Hello {user.full_name},\n\n"
        f"a password reset was requested for your account: {_frontend('/reset-password/' + token)}\n"
        "If you did not ask for this, ignore this message.\n\n"
        f"{_app_name()}"
    )
    return notify(user.email, f"{_app_name()}: password reset", body)


def contact_admins(sender, admins: Iterable, subject: str, message: str) -> int:
    body = f"Message from reviewer {sender.full_name} <{sender.email}>:\n\n{message}"
    delivered = 0
    for admin in admins:
        if notify(admin.email, f"{_app_name()}: {subject}", body):
            delivered += 1
    return delivered
