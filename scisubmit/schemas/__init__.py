from .audit_log_schema import AuditLogSchema
from .auth_schema import EmailSchema, LoginSchema, RegisterSchema, ResetPasswordSchema
from .conference_schema import CategoryInputSchema, CategorySchema, ConferenceInputSchema, ConferenceSchema
from .paper_schema import (
    PARTICIPANT_PAPER_EXCLUDE,
    AdminPaperUpdateSchema,
    AssignReviewerSchema,
    AuthorSchema,
    PaperEditSchema,
    PaperFilterSchema,
    PaperSchema,
    PaperSubmitSchema,
    ReopenSchema,
    ReviewerAssignmentSchema,
)
from .review_schema import (
    ContactAdminSchema,
    QuestionInputSchema,
    QuestionSchema,
    QuestionUpdateSchema,
    ReviewDraftSchema,
    ReviewResponseSchema,
    ReviewSchema,
)
from .user_schema import (
    AdminUserCreateSchema,
    AdminUserUpdateSchema,
    ChangePasswordSchema,
    ProfileUpdateSchema,
    UserFilterSchema,
    UserSchema,
    UserSummarySchema,
)

__all__ = [
    "AuditLogSchema",
    "EmailSchema",
    "LoginSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "CategoryInputSchema",
    "CategorySchema",
    "ConferenceInputSchema",
    "ConferenceSchema",
    "PARTICIPANT_PAPER_EXCLUDE",
    "AdminPaperUpdateSchema",
    "AssignReviewerSchema",
    "AuthorSchema",
    "PaperEditSchema",
    "PaperFilterSchema",
    "PaperSchema",
    "PaperSubmitSchema",
    "ReopenSchema",
    "ReviewerAssignmentSchema",
    "ContactAdminSchema",
    "QuestionInputSchema",
    "QuestionSchema",
    "QuestionUpdateSchema",
    "ReviewDraftSchema",
    "ReviewResponseSchema",
    "ReviewSchema",
    "AdminUserCreateSchema",
    "AdminUserUpdateSchema",
    "ChangePasswordSchema",
    "ProfileUpdateSchema",
    "UserFilterSchema",
    "UserSchema",
    "UserSummarySchema",
]
