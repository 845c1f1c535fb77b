from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from scisubmit.schemas import EmailSchema, LoginSchema, RegisterSchema, ResetPasswordSchema, UserSchema
from scisubmit.services import auth_service
from scisubmit.routes.v1.common import audited, current_user, json_payload, log_audit_event

auth_bp = Blueprint("auth_bp", __name__)

user_schema = UserSchema()
register_schema = RegisterSchema()
login_schema = LoginSchema()
email_schema = EmailSchema()
reset_password_schema = ResetPasswordSchema()


@auth_bp.route("/register", methods=["POST"])
def register():
    data = register_schema.load(json_payload())
    with audited("user.register", None, email=data["email"]):
        user = auth_service.register(data)
    log_audit_event(
        event_type="user.register.success",
        user_id=str(user.id),
        details={"email": user.email, "role": user.role.value},
        ip_address=request.remote_addr,
    )
    return jsonify({
        "message": "Registration successful. Check your email to verify the account.",
        "user": user_schema.dump(user),
    }), 201


@auth_bp.route("/verify-email", methods=["POST"])
def verify_email():
    token = json_payload().get("token")
    return _verify(token)


@auth_bp.route("/verify-email/<token>", methods=["GET"])
def verify_email_link(token):
    return _verify(token)


def _verify(token):
    with audited("user.verify_email", None):
        user = auth_service.verify_email(token)
    log_audit_event("user.verify_email.success", str(user.id), {"email": user.email}, ip_address=request.remote_addr)
    return jsonify({"message": "Email verified", "user": user_schema.dump(user)}), 200


@auth_bp.route("/resend-verification", methods=["POST"])
def resend_verification():
    data = email_schema.load(json_payload())
    auth_service.resend_verification(data["email"])
    # Same answer whether or not the address exists.
    return jsonify({"message": "If the account exists and is not verified, a new link has been sent"}), 200


@auth_bp.route("/login", methods=["POST"])
def login():
    data = login_schema.load(json_payload())
    with audited("auth.login", None, email=data["email"]):
        result = auth_service.login(data["email"], data["password"])
    user = result["user"]
    log_audit_event("auth.login.success", str(user.id), {"email": user.email}, ip_address=request.remote_addr)
    return jsonify({
        "access_token": result["access_token"],
        "refresh_token": result["refresh_token"],
        "user": user_schema.dump(user),
    }), 200


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    access_token = auth_service.refresh(get_jwt_identity(), get_jwt().get("jti"))
    return jsonify({"access_token": access_token}), 200


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    user = current_user()
    auth_service.logout(user)
    log_audit_event("auth.logout.success", str(user.id), {}, ip_address=request.remote_addr)
    return jsonify({"message": "Logged out"}), 200


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    data = email_schema.load(json_payload())
    auth_service.forgot_password(data["email"])
    return jsonify({"message": "If the account exists, a reset link has been sent"}), 200


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    data = reset_password_schema.load(json_payload())
    with audited("user.reset_password", None):
        user = auth_service.reset_password(data["token"], data["password"])
    log_audit_event("user.reset_password.success", str(user.id), {}, ip_address=request.remote_addr)
    return jsonify({"message": "Password has been reset"}), 200


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    return jsonify(user_schema.dump(current_user())), 200
