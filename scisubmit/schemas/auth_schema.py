from marshmallow import EXCLUDE, fields, validate

from scisubmit.extensions import ma
from scisubmit.models.enumerations import Role


class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    university = fields.String(allow_none=True, validate=validate.Length(max=200))
    faculty = fields.String(allow_none=True, validate=validate.Length(max=200))
    role = fields.Enum(Role, by_value=True, load_default=Role.PARTICIPANT)


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class EmailSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)


class ResetPasswordSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    token = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
