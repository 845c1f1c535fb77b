"""Helpers shared by the v1 route modules."""

import json
from contextlib import contextmanager
from typing import Any, Dict, Optional, Tuple

from flask import current_app, request
from flask_jwt_extended import get_current_user, get_jwt, get_jwt_identity

from scisubmit.errors import AuthenticationFailed, ValidationError, WorkflowError
from scisubmit.extensions import db
from scisubmit.models.User import User
from scisubmit.security_utils import audit_log
from scisubmit.utils.logging_utils import update_log_context
from scisubmit.utils.model_utils import audit_log_utils


def log_audit_event(event_type, user_id, details, ip_address=None, target_user_id=None):
    """Persist an audit row in its own commit; failures are logged, never raised."""
    detail = json.dumps(details, default=str) if isinstance(details, dict) else details
    audit_log(event_type, user_id=user_id, target_user_id=target_user_id, ip=ip_address, detail=detail)
    try:
        audit_log_utils.create_audit_log(
            event=event_type,
            user_id=str(user_id) if user_id else None,
            target_user_id=str(target_user_id) if target_user_id else None,
            ip=ip_address,
            detail=detail,
            actor_id=user_id,
            commit=False,
        )
        db.session.commit()
    except Exception as exc:
        current_app.logger.error("Failed to create audit log: %s", exc)
        db.session.rollback()


def _resolve_actor_context(action: str) -> Tuple[Optional[str], Dict[str, object]]:
    """Acting user id plus a context payload that also seeds the log context."""
    actor_identity = get_jwt_identity()
    actor_id = str(actor_identity) if actor_identity is not None else None
    jwt_payload = get_jwt()
    token_jti: Optional[str] = jwt_payload.get("jti") if jwt_payload else None

    context: Dict[str, object] = {"route": action}
    if actor_id:
        context["actor_id"] = actor_id
    if token_jti:
        context["token_jti"] = token_jti
    update_log_context(**context)
    return actor_id, context


def current_user() -> User:
    user = get_current_user()
    if user is None:
        raise AuthenticationFailed("Please log in")
    return user


@contextmanager
def audited(event: str, actor_id, target_user_id=None, **details: Any):
    """Record ``<event>.failed`` when the body raises a workflow error, then re-raise."""
    try:
        yield
    except WorkflowError as exc:
        db.session.rollback()
        log_audit_event(
            event_type=f"{event}.failed",
            user_id=actor_id,
            details=dict(details, error=exc.code, message=exc.message),
            ip_address=request.remote_addr,
            target_user_id=target_user_id,
        )
        raise


def json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _decode_list(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.startswith("["):
        try:
            return json.loads(text)
        except ValueError:
            raise ValidationError(f"Field '{key}' is not valid JSON", details={key: "Invalid JSON"}) from None
    if key == "keywords":
        return [item.strip() for item in text.split(",") if item.strip()]
    return value


def form_payload() -> Dict[str, Any]:
    """
    Fields of a multipart upload. Accepts either a ``data`` part holding a JSON
    document or plain form fields, with ``authors`` / ``keywords`` given as
    JSON arrays (keywords may also be comma separated).
    """
    if request.is_json:
        return json_payload()
    form = request.form.to_dict()
    raw = form.pop("data", None)
    if raw:
        try:
            document = json.loads(raw)
        except ValueError:
            raise ValidationError("Field 'data' is not valid JSON", details={"data": "Invalid JSON"}) from None
        if not isinstance(document, dict):
            raise ValidationError("Field 'data' must be a JSON object")
        form.update(document)
    for key in ("authors", "keywords"):
        if key in form:
            form[key] = _decode_list(key, form[key])
    return form
