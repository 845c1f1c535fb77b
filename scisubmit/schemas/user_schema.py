from marshmallow import EXCLUDE, fields, validate

from scisubmit.extensions import ma
from scisubmit.models.User import User
from scisubmit.models.enumerations import Role, UserStatus


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        exclude = (
            "password_hash",
            "verification_token_hash",
            "verification_token_expires_at",
            "reset_token_hash",
            "reset_token_expires_at",
            "refresh_jti",
        )

    id = fields.String(dump_only=True)
    role = fields.Enum(Role, by_value=True, dump_only=True)
    status = fields.Enum(UserStatus, by_value=True, dump_only=True)
    full_name = fields.String(dump_only=True)


class UserSummarySchema(ma.Schema):
    """Compact view used inside other payloads."""

    id = fields.String(dump_only=True)
    email = fields.Email(dump_only=True)
    first_name = fields.String(dump_only=True)
    last_name = fields.String(dump_only=True)
    university = fields.String(dump_only=True)


class ProfileUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    first_name = fields.String(validate=validate.Length(min=1, max=100))
    last_name = fields.String(validate=validate.Length(min=1, max=100))
    university = fields.String(allow_none=True, validate=validate.Length(max=200))
    faculty = fields.String(allow_none=True, validate=validate.Length(max=200))
    about = fields.String(allow_none=True)


class ChangePasswordSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    current_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True)


class AdminUserCreateSchema(ProfileUpdateSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    role = fields.Enum(Role, by_value=True)
    status = fields.Enum(UserStatus, by_value=True)
    is_verified = fields.Boolean()


class AdminUserUpdateSchema(ProfileUpdateSchema):
    email = fields.Email()
    password = fields.String(load_only=True)
    role = fields.Enum(Role, by_value=True)
    status = fields.Enum(UserStatus, by_value=True)
    is_verified = fields.Boolean()


class UserFilterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.Enum(Role, by_value=True)
    status = fields.Enum(UserStatus, by_value=True)
