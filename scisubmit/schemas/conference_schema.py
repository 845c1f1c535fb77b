from marshmallow import EXCLUDE, fields, validate

from scisubmit.extensions import ma
from scisubmit.models.Conference import Category, Conference
from scisubmit.models.enumerations import ConferenceStatus


class ConferenceSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Conference
        include_fk = True

    id = fields.String(dump_only=True)
    created_by_id = fields.String(dump_only=True)
    status = fields.Enum(ConferenceStatus, by_value=True, dump_only=True)


class ConferenceInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    year = fields.Integer(required=True)
    location = fields.String(required=True, validate=validate.Length(min=1, max=200))
    university = fields.String(required=True, validate=validate.Length(min=1, max=200))
    start_date = fields.Date(required=True)
    end_date = fields.Date(required=True)
    deadline_submission = fields.Date(required=True)
    submission_confirmation = fields.Date(required=True)
    deadline_review = fields.Date(required=True)
    deadline_correction = fields.Date(required=True)
    status = fields.Enum(ConferenceStatus, by_value=True)


class CategorySchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Category

    id = fields.String(dump_only=True)
    name = fields.String(required=True)


class CategoryInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    is_active = fields.Boolean()
