from marshmallow import EXCLUDE, fields, validate

from scisubmit.extensions import ma
from scisubmit.models.Review import Question, Review, ReviewResponse
from scisubmit.models.enumerations import QuestionType, Recommendation


class QuestionSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Question

    id = fields.String(dump_only=True)
    type = fields.Enum(QuestionType, by_value=True, dump_only=True)
    options = fields.Dict()


class QuestionInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    text = fields.String(required=True, validate=validate.Length(min=1))
    type = fields.Enum(QuestionType, by_value=True, required=True)
    options = fields.Dict(load_default=dict)
    category = fields.String(allow_none=True, validate=validate.Length(max=120))


class QuestionUpdateSchema(QuestionInputSchema):
    text = fields.String(validate=validate.Length(min=1))
    type = fields.Enum(QuestionType, by_value=True)
    options = fields.Dict()


class ReviewResponseSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ReviewResponse
        include_fk = True
        exclude = ("id", "review_id")

    question_id = fields.String(dump_only=True, allow_none=True)
    question = fields.Pluck(QuestionSchema, "text", dump_only=True)
    answer = fields.Raw(allow_none=True)


class ReviewSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Review
        include_fk = True

    id = fields.String(dump_only=True)
    paper_id = fields.String(dump_only=True)
    reviewer_id = fields.String(dump_only=True)
    recommendation = fields.Enum(Recommendation, by_value=True, allow_none=True, dump_only=True)
    responses = fields.List(fields.Nested(ReviewResponseSchema), dump_only=True)
    paper_title = fields.Function(lambda review: review.paper.title if review.paper else None, dump_only=True)


class ResponseInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    question_id = fields.UUID(required=True)
    answer = fields.Raw(allow_none=True)


class ReviewDraftSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    paper_id = fields.UUID()
    responses = fields.List(fields.Nested(ResponseInputSchema), load_default=list)
    recommendation = fields.String(allow_none=True)
    comments = fields.String(allow_none=True)


class ContactAdminSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    subject = fields.String(required=True, validate=validate.Length(min=1, max=200))
    message = fields.String(required=True, validate=validate.Length(min=1))
    admin_id = fields.UUID(allow_none=True)
