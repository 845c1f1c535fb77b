import hashlib
import re
import secrets
import uuid
from typing import Any, Optional

from scisubmit.utils.logging_utils import get_logger, log_context

_PASSWORD_RULES = (
    (re.compile(r".{8,}"), "at least 8 characters"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"\d"), "a digit"),
)


def password_problems(password: Optional[str]) -> list:
    """Return the unmet password rules (empty when the password is acceptable)."""
    if not password:
        return [rule for _, rule in _PASSWORD_RULES]
    return [rule for pattern, rule in _PASSWORD_RULES if not pattern.search(password)]


def coerce_uuid(value: Any) -> Optional[uuid.UUID]:
    """Parse a UUID from a route/JSON value; ``None`` when it is not a UUID."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def audit_log(event: str, *, user_id: Optional[str] = None, target_user_id: Optional[str] = None,
              ip: Optional[str] = None, detail: Optional[str] = None) -> None:
    """Mirror an audit event to the ``audit`` log category."""
    with log_context(event=event, actor_id=user_id, target_user_id=target_user_id, ip=ip):
        get_logger("audit").info("%s %s", event, detail or "")


def log_structured(kind: str, **fields: Any) -> None:
    parts = " ".join(f"{key}={value}" for key, value in fields.items() if value not in (None, {}, ""))
    get_logger("app").info("%s %s", kind, parts)
