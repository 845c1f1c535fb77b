"""
Generic persistence helpers shared by the per-model ``*_utils`` modules.

Every write goes through :func:`_tracked`, which scopes the log context to the
model being touched and mirrors the change to the ``audit`` log category once
the session work succeeds. Domain-level audit rows (``AuditLog``) are written
by the services, not here.
"""
from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

from scisubmit.extensions import db
from scisubmit.security_utils import audit_log, coerce_uuid
from scisubmit.utils.logging_utils import get_logger, log_context

ModelType = TypeVar("ModelType", bound=db.Model)

REDACTED = "***REDACTED***"
# matched against the underscore-separated words of a field name
_SENSITIVE_WORDS = frozenset({"password", "secret", "token", "jti", "key", "credential", "credentials"})

log = get_logger("model_utils")


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    enum_value = getattr(value, "value", None)
    if isinstance(enum_value, str):
        return enum_value
    return str(value)


def _sanitize_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Loggable copy of ``data``: credentials masked, enums and UUIDs flattened."""
    return {
        key: REDACTED if _SENSITIVE_WORDS.intersection(key.lower().split("_")) else _plain(value)
        for key, value in data.items()
    }


def _identity(instance: Any) -> Optional[str]:
    pk = getattr(instance, "id", None)
    return None if pk is None else str(pk)


def _finish(commit: bool, flush: bool) -> None:
    if commit:
        db.session.commit()
    elif flush:
        db.session.flush()


@contextmanager
def _tracked(model_name: str, operation: str, *, actor_id=None, event_name=None, context=None):
    """
    Run a write inside a model-scoped log context. The block fills the yielded
    dict with the audit detail; it is emitted only if the block does not raise.
    """
    fields = {"model": model_name, "action": operation}
    if actor_id is not None:
        fields["actor_id"] = str(actor_id)
    fields.update({f"ctx_{key}": value for key, value in (context or {}).items()})

    detail: Dict[str, Any] = {"operation": operation, "model": model_name}
    with log_context(**fields):
        try:
            yield detail
        except Exception:
            log.exception("%s %s failed target=%s", model_name, operation, detail.get("target_id"))
            raise
        log.debug("%s %s ok target=%s", model_name, operation, detail.get("target_id"))
        try:
            audit_log(
                event_name or f"{model_name.lower()}.{operation}",
                user_id=None if actor_id is None else str(actor_id),
                detail=json.dumps(detail, default=_plain),
            )
        except Exception:
            log.exception("Could not mirror %s %s to the audit log", model_name, operation)


def _coerce_pk(model_cls: Type[ModelType], raw: Any) -> Any:
    column = next(iter(model_cls.__table__.primary_key.columns))
    if isinstance(column.type, db.Integer):
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None
    return coerce_uuid(raw)


def create_instance(
    model_cls: Type[ModelType],
    commit: bool = True,
    flush: bool = False,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    **attributes: Any,
) -> ModelType:
    with _tracked(model_cls.__name__, "create", actor_id=actor_id, event_name=event_name, context=context) as detail:
        detail["attributes"] = _sanitize_payload(attributes)
        instance = model_cls(**attributes)
        db.session.add(instance)
        _finish(commit, flush)
        detail["target_id"] = _identity(instance)
    return instance


def get_instance(
    model_cls: Type[ModelType],
    instance_id: Any,
    *,
    actor_id: Optional[Any] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Optional[ModelType]:
    """Primary-key lookup. Malformed ids resolve to ``None`` instead of raising."""
    key = None if instance_id is None else _coerce_pk(model_cls, instance_id)
    if key is None:
        return None
    instance = db.session.get(model_cls, key)
    if instance is None:
        log.debug("%s %s not found actor=%s", model_cls.__name__, instance_id, actor_id)
    return instance


def list_instances(
    model_cls: Type[ModelType],
    *,
    filters: Optional[Sequence[Any]] = None,
    order_by: Optional[Union[Any, Sequence[Any]]] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    actor_id: Optional[Any] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[ModelType]:
    query = db.session.query(model_cls)
    if filters:
        query = query.filter(*filters)
    if order_by is not None:
        query = query.order_by(*(order_by if isinstance(order_by, (list, tuple)) else [order_by]))
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def update_instance(
    instance: ModelType,
    commit: bool = True,
    flush: bool = False,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    **attributes: Any,
) -> ModelType:
    """
    Assign ``attributes`` verbatim. ``None`` is written as ``None``; callers drop
    keys they want left untouched.
    """
    model_name = type(instance).__name__
    with _tracked(model_name, "update", actor_id=actor_id, event_name=event_name, context=context) as detail:
        detail["target_id"] = _identity(instance)
        detail["before"] = _sanitize_payload({key: getattr(instance, key, None) for key in attributes})
        detail["after"] = _sanitize_payload(attributes)
        for key, value in attributes.items():
            setattr(instance, key, value)
        _finish(commit, flush)
    return instance


def delete_instance(
    instance: ModelType,
    commit: bool = True,
    flush: bool = False,
    *,
    actor_id: Optional[Any] = None,
    event_name: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    model_name = type(instance).__name__
    with _tracked(model_name, "delete", actor_id=actor_id, event_name=event_name, context=context) as detail:
        detail["target_id"] = _identity(instance)
        db.session.delete(instance)
        _finish(commit, flush)
