"""Error taxonomy shared by services and routes.

Services raise these before touching the database; the app factory turns
them into ``{"error": code, "message": ...}`` JSON responses.
"""

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, message: str, *, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(WorkflowError):
    code = "validation_error"
    status_code = 400


class NotFound(WorkflowError):
    code = "not_found"
    status_code = 404


class Forbidden(WorkflowError):
    code = "forbidden"
    status_code = 403


class NotOwner(Forbidden):
    code = "not_owner"


class InvalidState(WorkflowError):
    code = "invalid_state"
    status_code = 409


class AlreadySent(InvalidState):
    code = "already_sent"


class ConferenceNotOngoing(InvalidState):
    code = "conference_not_ongoing"


class DeadlineExpired(WorkflowError):
    code = "deadline_expired"
    status_code = 400


class ReviewDeadlineExpired(DeadlineExpired):
    code = "review_deadline_expired"


class Conflict(WorkflowError):
    code = "conflict"
    status_code = 409


class AuthenticationFailed(WorkflowError):
    code = "authentication_failed"
    status_code = 401
