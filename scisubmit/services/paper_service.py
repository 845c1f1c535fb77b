"""
Paper submission, editing and admin-side lifecycle operations.

Preconditions are checked before any write. File swaps follow
"write new file, commit record, delete old file"; a failed commit removes
the new file so the record never points at a missing one.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from scisubmit.errors import (
    ConferenceNotOngoing,
    DeadlineExpired,
    Forbidden,
    InvalidState,
    NotFound,
    NotOwner,
    ValidationError,
)
from scisubmit.extensions import db
from scisubmit.models.Paper import Paper, ReviewerAssignment
from scisubmit.models.Review import Review
from scisubmit.models.User import User
from scisubmit.models.enumerations import ConferenceStatus, PaperEvent, PaperStatus, Role, UserStatus
from scisubmit.services import notifications, workflow
from scisubmit.services.catalog_service import get_category
from scisubmit.services.conference_service import get_conference
from scisubmit.services.file_store import allowed_file, get_file_store
from scisubmit.utils.clock import get_clock, is_past
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.model_utils import paper_utils, user_utils

logger = get_logger("paper")

# Only admins or the review workflow may touch these.
PROTECTED_FIELDS = ("reviewer_id", "reviewer", "deadline_date", "awarded", "status", "user_id", "user",
                    "conference_id", "submission_date", "review")
PARTICIPANT_FIELDS = ("title", "abstract", "keywords", "authors", "category_id")


class Upload:
    """An incoming file: raw bytes plus the client-supplied name."""

    def __init__(self, data: bytes, filename: str):
        self.data = data
        self.filename = filename

    @classmethod
    def from_storage(cls, storage) -> Optional["Upload"]:
        if storage is None or not getattr(storage, "filename", None):
            return None
        return cls(storage.read(), storage.filename)


def _validate_upload(upload: Optional[Upload], required: bool) -> None:
    if upload is None:
        if required:
            raise ValidationError("A paper file is required", details={"file": "Required"})
        return
    if not upload.data:
        raise ValidationError("The uploaded file is empty", details={"file": "Empty file"})
    if not allowed_file(upload.filename):
        raise ValidationError("Invalid file type; PDF, DOC and DOCX are accepted", details={"file": "Invalid type"})


def _active_category(category_id):
    category = get_category(category_id)
    if not category.is_active:
        raise ValidationError("Category is not active", details={"category_id": "Inactive category"})
    return category


def _validate_content(values: Dict[str, Any]) -> None:
    errors = {}
    for field in ("title", "abstract"):
        if field in values and not (values[field] or "").strip():
            errors[field] = "Required"
    if "authors" in values and not values["authors"]:
        errors["authors"] = "At least one author is required"
    if errors:
        raise ValidationError("Invalid paper data", details=errors)


def _commit_with_file(new_path: Optional[str], old_path: Optional[str] = None) -> None:
    """Commit the session; on failure drop ``new_path``, on success drop ``old_path``."""
    store = get_file_store()
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        if new_path:
            store.delete(new_path)
        raise
    if new_path and old_path and old_path != new_path:
        store.delete(old_path)


def _get_paper(paper_id) -> Paper:
    paper = paper_utils.get_paper_by_id(paper_id)
    if paper is None:
        raise NotFound("Paper not found")
    return paper


def _owned_paper(user: User, paper_id) -> Paper:
    paper = _get_paper(paper_id)
    if paper.user_id != user.id:
        raise NotOwner("You are not the author of this paper")
    return paper


# --- Participant side ---

def submit(user: User, data: Dict[str, Any], upload: Optional[Upload]) -> Paper:
    if user.role != Role.PARTICIPANT:
        raise Forbidden("Only participants can submit papers")
    conference = get_conference(data.get("conference_id"))
    if is_past(conference.deadline_submission):
        raise DeadlineExpired("The submission deadline for this conference has passed")
    if conference.status != ConferenceStatus.ONGOING:
        raise ConferenceNotOngoing("Papers can only be submitted to an ongoing conference")
    category = _active_category(data.get("category_id"))
    values = {key: data.get(key) for key in ("title", "abstract", "authors")}
    _validate_content(values)
    _validate_upload(upload, required=True)

    status = PaperStatus.SUBMITTED if data.get("is_final") else PaperStatus.DRAFT
    with log_context(module="paper_service", action="submit", actor_id=str(user.id)):
        path = get_file_store().save(upload.data, upload.filename, folder=f"docs/{conference.id}")
        try:
            paper = paper_utils.create_paper(
                actor_id=user.id,
                title=values["title"].strip(),
                abstract=values["abstract"].strip(),
                keywords=data.get("keywords") or [],
                authors=values["authors"],
                user_id=user.id,
                conference_id=conference.id,
                category_id=category.id,
                file_path=path,
                submission_date=get_clock().now(),
                deadline_date=conference.deadline_submission,
                status=status,
            )
        except Exception:
            db.session.rollback()
            get_file_store().delete(path)
            raise
        _commit_with_file(path)
        logger.info("paper %s submitted by %s status=%s", paper.id, user.id, paper.status.value)
        return paper


def edit(user: User, paper_id, updates: Dict[str, Any], upload: Optional[Upload] = None) -> Paper:
    paper = _owned_paper(user, paper_id)
    stripped = sorted(key for key in updates if key in PROTECTED_FIELDS)
    if stripped:
        logger.info("paper %s edit: ignoring protected fields %s", paper.id, stripped)
    changes = {key: updates[key] for key in PARTICIPANT_FIELDS if key in updates}

    if paper.status not in workflow.PARTICIPANT_EDITABLE:
        raise InvalidState(f"A paper in status {paper.status.value} can no longer be edited")
    correcting = paper.status == PaperStatus.ACCEPTED_WITH_CHANGES
    if correcting:
        if is_past(paper.conference.deadline_correction):
            raise DeadlineExpired("The correction deadline has passed")
    elif is_past(paper.deadline_date):
        raise DeadlineExpired("The submission deadline for this paper has passed")

    _validate_content(changes)
    if "category_id" in changes:
        changes["category_id"] = _active_category(changes["category_id"]).id
    _validate_upload(upload, required=False)

    with log_context(module="paper_service", action="edit", actor_id=str(user.id)):
        new_path = None
        old_path = paper.file_path
        if upload is not None:
            new_path = get_file_store().save(upload.data, upload.filename, folder=f"docs/{paper.conference_id}")
            changes["file_path"] = new_path
        try:
            paper_utils.update_paper(paper, actor_id=user.id, **changes)
            if correcting:
                workflow.apply_transition(paper, PaperEvent.RESUBMIT)
            elif paper.status == PaperStatus.DRAFT and updates.get("is_final"):
                workflow.apply_transition(paper, PaperEvent.FINALIZE)
                paper.submission_date = get_clock().now()
        except Exception:
            db.session.rollback()
            if new_path:
                get_file_store().delete(new_path)
            raise
        _commit_with_file(new_path, old_path)
        return paper


def delete(user: User, paper_id) -> None:
    paper = _owned_paper(user, paper_id)
    if paper.status != PaperStatus.DRAFT:
        raise InvalidState("Only draft papers can be deleted")
    path = paper.file_path
    with log_context(module="paper_service", action="delete", actor_id=str(user.id)):
        paper_utils.delete_paper(paper, actor_id=user.id)
        db.session.commit()
        get_file_store().delete(path)


def my_papers(user: User) -> List[Paper]:
    return paper_utils.list_papers(user_id=user.id, actor_id=user.id)


def get_own_paper(user: User, paper_id) -> Paper:
    return _owned_paper(user, paper_id)


def get_review_for_own_paper(user: User, paper_id) -> Review:
    paper = _owned_paper(user, paper_id)
    if paper.review is None:
        raise NotFound("This paper has no review yet")
    return paper.review


def file_for(user: User, paper_id) -> tuple:
    """(absolute path, download name) of a paper file the user may read."""
    paper = _get_paper(paper_id)
    allowed = (
        user.role == Role.ADMIN
        or paper.user_id == user.id
        or (user.role == Role.REVIEWER and paper.reviewer_id == user.id)
    )
    if not allowed:
        raise Forbidden("You cannot access this paper")
    path = get_file_store().require(paper.file_path)
    return path, paper.file_path.rsplit("/", 1)[-1].split("_", 1)[-1]


# --- Admin side ---

def list_papers(conference_id=None, status: Optional[PaperStatus] = None, category_id=None) -> List[Paper]:
    return paper_utils.list_papers(conference_id=conference_id, status=status, category_id=category_id)


def get_paper(paper_id) -> Paper:
    return _get_paper(paper_id)


def assign_reviewer(admin: User, paper_id, reviewer_id) -> Paper:
    paper = _get_paper(paper_id)
    reviewer = user_utils.get_user_by_id(reviewer_id)
    if reviewer is None:
        raise NotFound("Reviewer not found")
    if reviewer.role != Role.REVIEWER:
        raise ValidationError("The selected user is not a reviewer", details={"reviewer_id": "Not a reviewer"})
    if reviewer.status != UserStatus.ACTIVE:
        raise ValidationError("The selected reviewer is not active", details={"reviewer_id": "Inactive reviewer"})
    workflow.next_status(paper.status, PaperEvent.ASSIGN_REVIEWER)
    # one sent review per paper; a new reviewer could never send theirs
    if paper.review is not None:
        raise InvalidState("This paper already has a sent review and cannot be reassigned")

    with log_context(module="paper_service", action="assign_reviewer", actor_id=str(admin.id)):
        previous = paper.reviewer_id
        paper.reviewer_id = reviewer.id
        workflow.apply_transition(paper, PaperEvent.ASSIGN_REVIEWER)
        paper_utils.record_assignment(paper, reviewer.id, previous, admin.id)
        db.session.commit()
        logger.info("paper %s assigned to reviewer %s (previous %s)", paper.id, reviewer.id, previous)

    notifications.reviewer_assigned(reviewer, paper)
    return paper


def assignment_history(paper_id) -> List[ReviewerAssignment]:
    return paper_utils.list_assignments(_get_paper(paper_id))


def reopen(admin: User, paper_id, deadline_date: date) -> Paper:
    """Give the author a new deadline and return the paper to draft."""
    paper = _get_paper(paper_id)
    if not isinstance(deadline_date, date):
        raise ValidationError("A new deadline date is required", details={"deadline_date": "Required"})
    workflow.next_status(paper.status, PaperEvent.REOPEN)
    with log_context(module="paper_service", action="reopen", actor_id=str(admin.id)):
        paper_utils.update_paper(paper, actor_id=admin.id, event_name="paper.reopen", deadline_date=deadline_date)
        workflow.apply_transition(paper, PaperEvent.REOPEN)
        db.session.commit()
    notifications.deadline_reset(paper.user, paper)
    return paper


def admin_update(admin: User, paper_id, data: Dict[str, Any]) -> Paper:
    paper = _get_paper(paper_id)
    changes: Dict[str, Any] = {}
    if "authors" in data:
        _validate_content({"authors": data["authors"]})
        changes["authors"] = data["authors"]
    if "category_id" in data:
        changes["category_id"] = get_category(data["category_id"]).id
    if "awarded" in data:
        if data["awarded"] and paper.status != PaperStatus.ACCEPTED:
            raise InvalidState("Only accepted papers can be awarded")
        changes["awarded"] = bool(data["awarded"])
    with log_context(module="paper_service", action="admin_update", actor_id=str(admin.id)):
        paper_utils.update_paper(paper, actor_id=admin.id, event_name="paper.admin_update", **changes)
        db.session.commit()
    return paper


def admin_delete(admin: User, paper_id) -> None:
    paper = _get_paper(paper_id)
    path = paper.file_path
    with log_context(module="paper_service", action="admin_delete", actor_id=str(admin.id)):
        # reviews and assignment rows go with the paper (ORM cascade)
        paper_utils.delete_paper(paper, actor_id=admin.id)
        db.session.commit()
        get_file_store().delete(path)


def unassign_reviewer_papers(reviewer: User, actor_id=None) -> int:
    """Detach ``reviewer`` from all papers; papers under review go back to submitted. Caller commits."""
    papers = paper_utils.list_papers(reviewer_id=reviewer.id)
    for paper in papers:
        paper.reviewer_id = None
        if paper.status == PaperStatus.UNDER_REVIEW:
            workflow.apply_transition(paper, PaperEvent.UNASSIGN_REVIEWER)
    logger.info("unassigned reviewer %s from %s papers", reviewer.id, len(papers))
    return len(papers)
