from .enumerations import ConferenceStatus, PaperEvent, PaperStatus, QuestionType, Recommendation, Role, UserStatus
from .User import User
from .Conference import Category, Conference
from .Paper import Paper, ReviewerAssignment
from .Review import Question, Review, ReviewResponse
from .AuditLog import AuditLog

__all__ = [
    "AuditLog",
    "Category",
    "Conference",
    "ConferenceStatus",
    "Paper",
    "PaperEvent",
    "PaperStatus",
    "Question",
    "QuestionType",
    "Recommendation",
    "Review",
    "ReviewResponse",
    "ReviewerAssignment",
    "Role",
    "User",
    "UserStatus",
]
