# models/User.py

import uuid
import bcrypt
from datetime import datetime, timedelta, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Text, Enum as SqlEnum
from sqlalchemy.dialects.postgresql import UUID

from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.security_utils import generate_token, hash_token

from ..extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


def _as_aware(moment):
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class User(db.Model):
    __tablename__ = 'users'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(120), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    university = Column(String(200), nullable=True)
    faculty = Column(String(200), nullable=True)
    about = Column(Text, nullable=True)

    role = Column(SqlEnum(Role, name="user_role"), nullable=False, default=Role.PARTICIPANT)
    status = Column(SqlEnum(UserStatus, name="user_status"), nullable=False, default=UserStatus.INACTIVE)
    is_verified = Column(Boolean, nullable=False, default=False)

    password_hash = Column(String(128), nullable=False)
    verification_token_hash = Column(String(64), nullable=True, index=True)
    verification_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    reset_token_hash = Column(String(64), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    refresh_jti = Column(String(64), nullable=True)

    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    papers = db.relationship("Paper", back_populates="user", foreign_keys="Paper.user_id", lazy=True)

    # --- Password ---
    def set_password(self, raw_password: str):
        salt = bcrypt.gensalt()
        self.password_hash = bcrypt.hashpw(raw_password.encode(), salt).decode()

    def check_password(self, raw_password: str) -> bool:
        if not self.password_hash or not raw_password:
            return False
        try:
            return bcrypt.checkpw(raw_password.encode(), self.password_hash.encode())
        except ValueError:
            return False

    # --- One-time tokens (only hashes are stored) ---
    def generate_verification_token(self, ttl_hours: int = 48, now=None) -> str:
        token = generate_token()
        self.verification_token_hash = hash_token(token)
        self.verification_token_expires_at = (now or _utcnow()) + timedelta(hours=ttl_hours)
        return token

    def generate_reset_token(self, ttl_minutes: int = 60, now=None) -> str:
        token = generate_token()
        self.reset_token_hash = hash_token(token)
        self.reset_token_expires_at = (now or _utcnow()) + timedelta(minutes=ttl_minutes)
        return token

    def reset_token_valid(self, now=None) -> bool:
        expires = _as_aware(self.reset_token_expires_at)
        return bool(self.reset_token_hash and expires and expires >= (now or _utcnow()))

    def verification_token_valid(self, now=None) -> bool:
        expires = _as_aware(self.verification_token_expires_at)
        return bool(self.verification_token_hash and expires and expires >= (now or _utcnow()))

    def clear_reset_token(self):
        self.reset_token_hash = None
        self.reset_token_expires_at = None

    def mark_verified(self):
        self.is_verified = True
        self.status = UserStatus.ACTIVE
        self.verification_token_hash = None
        self.verification_token_expires_at = None

    # --- Role helpers ---
    def has_role(self, role) -> bool:
        return self.role == Role(role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_reviewer(self) -> bool:
        return self.role == Role.REVIEWER

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"<User {self.email} ({self.role.value if self.role else '-'})>"
