from enum import Enum


class Role(str, Enum):
    PARTICIPANT = 'participant'
    REVIEWER = 'reviewer'
    ADMIN = 'admin'


class UserStatus(str, Enum):
    PENDING = 'pending'
    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    INACTIVE = 'inactive'


class ConferenceStatus(str, Enum):
    UPCOMING = 'upcoming'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'
    CANCELED = 'canceled'


class PaperStatus(str, Enum):
    DRAFT = 'draft'
    SUBMITTED = 'submitted'
    UNDER_REVIEW = 'under_review'
    ACCEPTED_WITH_CHANGES = 'accepted_with_changes'
    SUBMITTED_AFTER_REVIEW = 'submitted_after_review'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class Recommendation(str, Enum):
    PUBLISH = 'Publikovať'
    PUBLISH_WITH_CHANGES = 'Publikovať_so_zmenami'
    REJECT = 'Odmietnuť'


class QuestionType(str, Enum):
    RATING = 'rating'
    YES_NO = 'yes_no'
    TEXT = 'text'


class PaperEvent(str, Enum):
    FINALIZE = 'finalize'
    REOPEN = 'reopen'
    ASSIGN_REVIEWER = 'assign_reviewer'
    UNASSIGN_REVIEWER = 'unassign_reviewer'
    REVIEW_PUBLISH = 'review_sent:publish'
    REVIEW_PUBLISH_WITH_CHANGES = 'review_sent:publish_with_changes'
    REVIEW_REJECT = 'review_sent:reject'
    REVIEW_NO_DECISION = 'review_sent:none'
    RESUBMIT = 'resubmit'
