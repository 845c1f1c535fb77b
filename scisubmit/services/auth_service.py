from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token

from scisubmit.errors import AuthenticationFailed, Forbidden, ValidationError
from scisubmit.extensions import db
from scisubmit.models.User import User
from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.security_utils import hash_token
from scisubmit.services import notifications
from scisubmit.services.user_service import check_password_strength, ensure_email_free
from scisubmit.utils.clock import get_clock
from scisubmit.utils.logging_utils import get_logger, log_context
from scisubmit.utils.model_utils import user_utils

logger = get_logger("auth")

SELF_REGISTER_ROLES = (Role.PARTICIPANT, Role.REVIEWER)

_STATUS_MESSAGES = {
    UserStatus.PENDING: "Your account is waiting for approval",
    UserStatus.INACTIVE: "Your account is not active",
    UserStatus.SUSPENDED: "Your account has been suspended",
}


def register(data: Dict[str, Any]) -> User:
    role = Role(data.get("role") or Role.PARTICIPANT)
    if role not in SELF_REGISTER_ROLES:
        raise Forbidden("This role cannot be chosen at registration")
    email = ensure_email_free(data.get("email"))
    check_password_strength(data.get("password"))
    with log_context(module="auth_service", action="register"):
        user = user_utils.create_user(
            password=data["password"],
            commit=False,
            email=email,
            first_name=data["first_name"].strip(),
            last_name=data["last_name"].strip(),
            university=data.get("university"),
            faculty=data.get("faculty"),
            role=role,
            status=UserStatus.INACTIVE,
            is_verified=False,
        )
        token = user.generate_verification_token(current_app.config.get("VERIFICATION_TOKEN_HOURS", 48), get_clock().now())
        db.session.commit()
        logger.info("registered user %s role=%s", user.id, role.value)
    notifications.email_verification(user, token)
    return user


def verify_email(token: str) -> User:
    user = user_utils.get_user_by_token_hash("verification_token_hash", hash_token(token or ""))
    if user is None or not user.verification_token_valid(get_clock().now()):
        raise ValidationError("Invalid or expired verification link")
    user.mark_verified()
    db.session.commit()
    logger.info("email verified for user %s", user.id)
    return user


def resend_verification(email: str) -> None:
    user = user_utils.get_user_by_email(email)
    if user is None or user.is_verified:
        logger.info("resend verification ignored for %s", email)
        return
    token = user.generate_verification_token(current_app.config.get("VERIFICATION_TOKEN_HOURS", 48), get_clock().now())
    db.session.commit()
    notifications.email_verification(user, token)


def _issue_tokens(user: User) -> Tuple[str, str]:
    claims = {"role": user.role.value}
    access = create_access_token(identity=str(user.id), additional_claims=claims)
    refresh = create_refresh_token(identity=str(user.id), additional_claims=claims)
    user.refresh_jti = decode_token(refresh)["jti"]
    return access, refresh


def login(email: str, password: str) -> Dict[str, Any]:
    user = user_utils.get_user_by_email(email)
    if user is None or not user.check_password(password):
        logger.warning("login failed for %s", email)
        raise AuthenticationFailed("Invalid email or password")
    if not user.is_verified:
        raise Forbidden("Please verify your email before logging in", code="email_not_verified")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden(_STATUS_MESSAGES.get(user.status, "Your account is not active"), code="account_not_active")
    with log_context(module="auth_service", action="login", actor_id=str(user.id)):
        access, refresh = _issue_tokens(user)
        user.last_login = get_clock().now()
        db.session.commit()
        logger.info("login ok for user %s", user.id)
    return {"access_token": access, "refresh_token": refresh, "user": user}


def refresh(user_id, jti: str) -> str:
    user = user_utils.get_user_by_id(user_id)
    if user is None or not user.refresh_jti or user.refresh_jti != jti:
        raise AuthenticationFailed("Session expired, please log in again")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden(_STATUS_MESSAGES.get(user.status, "Your account is not active"), code="account_not_active")
    return create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})


def logout(user: Optional[User]) -> None:
    if user is None:
        return
    user.refresh_jti = None
    db.session.commit()
    logger.info("logout for user %s", user.id)


def forgot_password(email: str) -> None:
    user = user_utils.get_user_by_email(email)
    if user is None:
        logger.info("password reset requested for unknown email %s", email)
        return
    token = user.generate_reset_token(current_app.config.get("RESET_TOKEN_MINUTES", 60), get_clock().now())
    db.session.commit()
    notifications.password_reset(user, token)


def reset_password(token: str, password: str) -> User:
    user = user_utils.get_user_by_token_hash("reset_token_hash", hash_token(token or ""))
    if user is None or not user.reset_token_valid(get_clock().now()):
        raise ValidationError("Invalid or expired reset link")
    check_password_strength(password)
    user.set_password(password)
    user.clear_reset_token()
    user.refresh_jti = None
    db.session.commit()
    logger.info("password reset for user %s", user.id)
    return user
