from __future__ import annotations

from typing import Any, Dict, List, Optional

from scisubmit.errors import AuthenticationFailed, Conflict, InvalidState, NotFound, ValidationError
from scisubmit.extensions import db
from scisubmit.models.User import User
from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.security_utils import password_problems
from scisubmit.services import paper_service
from scisubmit.services.file_store import get_file_store
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.model_utils import paper_utils, review_utils, user_utils

logger = get_logger("auth")

PROFILE_FIELDS = ("first_name", "last_name", "university", "faculty", "about")
ADMIN_FIELDS = PROFILE_FIELDS + ("role", "status", "is_verified")


def check_password_strength(password: Optional[str]) -> None:
    problems = password_problems(password)
    if problems:
        raise ValidationError("Password must contain " + ", ".join(problems), details={"password": problems})


def ensure_email_free(email: str, current: Optional[User] = None) -> str:
    email = user_utils.normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("A valid email is required", details={"email": "Invalid email"})
    existing = user_utils.get_user_by_email(email)
    if existing is not None and existing is not current:
        raise Conflict("Email already exists")
    return email


def get_user(user_id) -> User:
    user = user_utils.get_user_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(role: Optional[Role] = None, status: Optional[UserStatus] = None) -> List[User]:
    return user_utils.list_users(role=role, status=status)


def list_reviewers() -> List[User]:
    return user_utils.list_users(role=Role.REVIEWER, status=UserStatus.ACTIVE)


# --- Self service ---

def update_profile(user: User, data: Dict[str, Any]) -> User:
    changes = {key: data[key] for key in PROFILE_FIELDS if key in data}
    for key in ("first_name", "last_name"):
        if key in changes and not (changes[key] or "").strip():
            raise ValidationError("Name fields cannot be empty", details={key: "Required"})
    with log_context(module="user_service", action="update_profile", actor_id=str(user.id)):
        return user_utils.update_user(user, actor_id=user.id, event_name="user.profile", **changes)


def change_password(user: User, current_password: str, new_password: str) -> User:
    if not user.check_password(current_password):
        raise AuthenticationFailed("Current password is incorrect")
    check_password_strength(new_password)
    user.set_password(new_password)
    user.refresh_jti = None
    db.session.commit()
    logger.info("password changed for user %s", user.id)
    return user


# --- Admin ---

def create_user(admin: User, data: Dict[str, Any]) -> User:
    email = ensure_email_free(data.get("email"))
    check_password_strength(data.get("password"))
    attributes = {key: data[key] for key in ADMIN_FIELDS if key in data}
    attributes.setdefault("role", Role.PARTICIPANT)
    attributes.setdefault("status", UserStatus.ACTIVE)
    attributes.setdefault("is_verified", True)
    with log_context(module="user_service", action="admin_create", actor_id=str(admin.id)):
        return user_utils.create_user(password=data["password"], actor_id=admin.id, email=email, **attributes)


def update_user(admin: User, user_id, data: Dict[str, Any]) -> User:
    user = get_user(user_id)
    changes = {key: data[key] for key in ADMIN_FIELDS if key in data}
    if "email" in data:
        changes["email"] = ensure_email_free(data["email"], current=user)
    if user.id == admin.id and (changes.get("role", Role.ADMIN) != Role.ADMIN
                                or changes.get("status", UserStatus.ACTIVE) != UserStatus.ACTIVE):
        raise InvalidState("Admins cannot demote or deactivate themselves")
    if data.get("password"):
        check_password_strength(data["password"])
        user.set_password(data["password"])
        user.refresh_jti = None
    with log_context(module="user_service", action="admin_update", actor_id=str(admin.id)):
        return user_utils.update_user(user, actor_id=admin.id, **changes)


def delete_user(admin: User, user_id) -> None:
    """
    Remove a user and everything hanging off them: a reviewer's reviews go and
    their papers are released back to submitted; a participant's papers go
    (with their reviews and files).
    """
    user = get_user(user_id)
    if user.id == admin.id:
        raise InvalidState("Admins cannot delete themselves")
    doomed_files = []
    with log_context(module="user_service", action="admin_delete", actor_id=str(admin.id)):
        if user.role == Role.REVIEWER:
            removed = review_utils.delete_reviews(review_utils.list_reviews(reviewer_id=user.id), actor_id=admin.id)
            released = paper_service.unassign_reviewer_papers(user, actor_id=admin.id)
            logger.info("reviewer %s removed: %s reviews deleted, %s papers released", user.id, removed, released)
        for paper in paper_utils.list_papers(user_id=user.id):
            doomed_files.append(paper.file_path)
            paper_utils.delete_paper(paper, actor_id=admin.id)
        user_utils.delete_user(user, actor_id=admin.id)
        db.session.commit()
    store = get_file_store()
    for path in doomed_files:
        store.delete(path)
