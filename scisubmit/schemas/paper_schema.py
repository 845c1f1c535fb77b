from marshmallow import EXCLUDE, fields, validate

from scisubmit.extensions import ma
from scisubmit.models.Paper import Paper, ReviewerAssignment
from scisubmit.models.enumerations import PaperStatus
from scisubmit.schemas.user_schema import UserSummarySchema


class AuthorSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class PaperSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Paper
        include_fk = True
        exclude = ("file_path",)

    id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    conference_id = fields.String(dump_only=True)
    category_id = fields.String(dump_only=True)
    reviewer_id = fields.String(dump_only=True, allow_none=True)
    status = fields.Enum(PaperStatus, by_value=True, dump_only=True)
    keywords = fields.List(fields.String())
    authors = fields.List(fields.Nested(AuthorSchema))

    file_name = fields.Method("get_file_name", dump_only=True)
    category = fields.Function(lambda paper: paper.category.name if paper.category else None, dump_only=True)
    conference = fields.Function(lambda paper: paper.conference.label if paper.conference else None, dump_only=True)
    user = fields.Nested(UserSummarySchema, dump_only=True)
    reviewer = fields.Nested(UserSummarySchema, dump_only=True, allow_none=True)
    has_review = fields.Function(lambda paper: paper.review is not None, dump_only=True)

    def get_file_name(self, paper):
        if not paper.file_path:
            return None
        return paper.file_path.rsplit("/", 1)[-1].split("_", 1)[-1]


# Authors see their papers without the reviewer's identity.
PARTICIPANT_PAPER_EXCLUDE = ("reviewer", "reviewer_id")


class PaperSubmitSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1, max=300))
    abstract = fields.String(required=True, validate=validate.Length(min=1))
    keywords = fields.List(fields.String(), load_default=list)
    authors = fields.List(fields.Nested(AuthorSchema), required=True, validate=validate.Length(min=1))
    conference_id = fields.UUID(required=True)
    category_id = fields.UUID(required=True)
    is_final = fields.Boolean(load_default=False)


class PaperEditSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=validate.Length(min=1, max=300))
    abstract = fields.String(validate=validate.Length(min=1))
    keywords = fields.List(fields.String())
    authors = fields.List(fields.Nested(AuthorSchema), validate=validate.Length(min=1))
    category_id = fields.UUID()
    is_final = fields.Boolean()


class AdminPaperUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    authors = fields.List(fields.Nested(AuthorSchema), validate=validate.Length(min=1))
    category_id = fields.UUID()
    awarded = fields.Boolean()


class PaperFilterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    conference_id = fields.UUID()
    category_id = fields.UUID()
    status = fields.Enum(PaperStatus, by_value=True)


class AssignReviewerSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    reviewer_id = fields.UUID(required=True)


class ReopenSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    deadline_date = fields.Date(required=True)


class ReviewerAssignmentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ReviewerAssignment
        include_fk = True

    paper_id = fields.String(dump_only=True)
    reviewer_id = fields.String(dump_only=True, allow_none=True)
    previous_reviewer_id = fields.String(dump_only=True, allow_none=True)
    assigned_by_id = fields.String(dump_only=True, allow_none=True)
