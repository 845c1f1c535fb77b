from __future__ import annotations

from typing import List, Optional

from scisubmit.extensions import db
from scisubmit.models.User import User
from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.utils.logging_utils import get_logger, log_context

from .base import _sanitize_payload, create_instance, delete_instance, get_instance, list_instances, update_instance

logger = get_logger("auth")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def create_user(*, password: str, commit: bool = True, actor_id=None, **attributes) -> User:
    attributes["email"] = normalize_email(attributes.get("email"))
    with log_context(module="user_utils", action="create_user", actor_id=actor_id):
        logger.info("create_user attributes=%s", _sanitize_payload(attributes))
        user = create_instance(User, commit=False, actor_id=actor_id, event_name="user.create",
                               password_hash="", **attributes)
        user.set_password(password)
        db.session.flush()
        if commit:
            db.session.commit()
        return user


def get_user_by_id(user_id) -> Optional[User]:
    return get_instance(User, user_id)


def get_user_by_email(email: str) -> Optional[User]:
    return User.query.filter(User.email == normalize_email(email)).first()


def get_user_by_token_hash(column: str, token_hash: str) -> Optional[User]:
    return User.query.filter(getattr(User, column) == token_hash).first()


def list_users(*, role: Optional[Role] = None, status: Optional[UserStatus] = None) -> List[User]:
    filters = []
    if role is not None:
        filters.append(User.role == role)
    if status is not None:
        filters.append(User.status == status)
    return list_instances(User, filters=filters, order_by=[User.last_name.asc(), User.first_name.asc()])


def update_user(user: User, *, commit: bool = True, actor_id=None, event_name: Optional[str] = None, **attributes) -> User:
    return update_instance(user, commit=commit, actor_id=actor_id, event_name=event_name or "user.update", **attributes)


def delete_user(user: User, *, commit: bool = False, actor_id=None) -> None:
    delete_instance(user, commit=commit, actor_id=actor_id, event_name="user.delete")
