"""
Session/auth gate for the admin panel.

Resolves the identity kept in the signed session cookie into an
``AdminPrincipal``, checks role tiers and manages server-side session
records. Every "who is this and may they do that" question goes through
``AuthGate``; the web layer only translates its outcomes into redirects.
"""
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple, Union

import bcrypt
from sqlalchemy import select, delete

from core.logger import auth_log
from models.admin import Administrator, AdminRole
from models.admin_session import AdminSession
from utils.helpers import utcnow
from utils.validators import normalize_email

SESSION_TTL = timedelta(days=30)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def has_permission(admin_role: str, required_role: str = AdminRole.ADMIN) -> bool:
    """SUPER_ADMIN passes both tiers; ADMIN passes only the standard one."""
    if required_role == AdminRole.ADMIN:
        return admin_role in AdminRole.ALL
    return admin_role == AdminRole.SUPER_ADMIN


class AdminPrincipal:
    """
    Sanitized view of an administrator for the rest of the application.
    Implements the attributes Flask-Login expects from a user object.
    """

    def __init__(self, id, name, email, role, avatar=None, is_active=True,
                 last_login=None, session_token=None):
        self.id = id
        self.name = name
        self.email = email
        self.role = role
        self.avatar = avatar
        self.is_active = is_active
        self.last_login = last_login
        self.session_token = session_token

    @classmethod
    def from_model(cls, admin: Administrator, session_token: str = None) -> 'AdminPrincipal':
        return cls(
            id=admin.id,
            name=admin.name,
            email=admin.email,
            role=admin.role,
            avatar=admin.avatar,
            is_active=admin.is_active,
            last_login=admin.last_login,
            session_token=session_token,
        )

    def with_token(self, token: str) -> 'AdminPrincipal':
        return AdminPrincipal(self.id, self.name, self.email, self.role, self.avatar,
                              self.is_active, self.last_login, token)

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN

    # Flask-Login
    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    def get_id(self):
        """Identity stored in the session cookie: ``<admin id>:<session token>``."""
        if self.session_token:
            return f"{self.id}:{self.session_token}"
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'avatar': self.avatar,
            'isActive': self.is_active,
            'lastLogin': self.last_login.isoformat() if self.last_login else None,
        }

    def __eq__(self, other):
        return isinstance(other, AdminPrincipal) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"<AdminPrincipal {self.email} {self.role}>"


@dataclass(frozen=True)
class Granted:
    admin: AdminPrincipal
    ok = True


@dataclass(frozen=True)
class Unauthenticated:
    ok = False


@dataclass(frozen=True)
class Unauthorized:
    admin: AdminPrincipal
    required: str
    ok = False


AccessOutcome = Union[Granted, Unauthenticated, Unauthorized]


def parse_identity(identity) -> Tuple[Optional[int], Optional[str]]:
    """Splits a cookie identity into ``(admin_id, token)``; ``(None, None)`` when unusable."""
    if not identity:
        return None, None
    raw_id, _, token = str(identity).partition(':')
    try:
        admin_id = int(raw_id)
    except ValueError:
        return None, None
    return admin_id, token or None


class AuthGate:
    def __init__(self, storage, session_ttl: timedelta = SESSION_TTL):
        self.storage = storage
        self.session_ttl = session_ttl

    def authenticate(self, email: str, password: str) -> Optional[AdminPrincipal]:
        """
        Check credentials. Unknown email, inactive account and wrong password
        all come back as ``None`` so callers cannot tell them apart.
        On success the last-login timestamp is committed.
        """
        email = normalize_email(email)
        if not email or not password:
            return None

        admin = self.storage.session.execute(
            select(Administrator).filter_by(email=email)
        ).scalar_one_or_none()

        if admin is None or not admin.is_active or not admin.check_password(password):
            auth_log.info(f"Failed admin login for {email}")
            return None

        with self.storage.transaction():
            admin.last_login = utcnow()

        auth_log.info(f"Admin {email} authenticated")
        return AdminPrincipal.from_model(admin)

    def open_session(self, principal: AdminPrincipal) -> AdminPrincipal:
        """Adds a session record for ``principal`` to the current transaction."""
        token = secrets.token_hex(32)
        record = AdminSession(
            admin_id=principal.id,
            token=token,
            expires_at=utcnow() + self.session_ttl,
        )
        self.storage.session.add(record)
        self.storage.session.flush()
        return principal.with_token(token)

    def resolve_session(self, identity) -> Optional[AdminPrincipal]:
        admin_id, token = parse_identity(identity)
        if admin_id is None or token is None:
            return None

        # Only safe columns, the hash is never loaded here
        row = self.storage.session.execute(
            select(
                Administrator.id,
                Administrator.name,
                Administrator.email,
                Administrator.role,
                Administrator.avatar,
                Administrator.is_active,
                Administrator.last_login,
            ).where(Administrator.id == admin_id)
        ).one_or_none()

        if row is None or not row.is_active:
            return None

        live = self.storage.session.execute(
            select(AdminSession.id).where(
                AdminSession.token == token,
                AdminSession.admin_id == admin_id,
                AdminSession.expires_at > utcnow(),
            )
        ).first()
        if live is None:
            return None

        return AdminPrincipal(session_token=token, **row._asdict())

    def check_access(self, principal: Optional[AdminPrincipal],
                     required_role: str = AdminRole.ADMIN) -> AccessOutcome:
        if principal is None:
            return Unauthenticated()
        if not has_permission(principal.role, required_role):
            return Unauthorized(principal, required_role)
        return Granted(principal)

    def end_session(self, identity) -> int:
        """Drops every session record of the administrator named by ``identity``."""
        admin_id, _ = parse_identity(identity)
        if admin_id is None:
            return 0
        with self.storage.transaction() as session:
            result = session.execute(
                delete(AdminSession).where(AdminSession.admin_id == admin_id)
            )
        auth_log.info(f"Ended {result.rowcount} session(s) for admin #{admin_id}")
        return result.rowcount

    def purge_expired_sessions(self, now=None) -> int:
        now = now or utcnow()
        with self.storage.transaction() as session:
            result = session.execute(
                delete(AdminSession).where(AdminSession.expires_at <= now)
            )
        auth_log.info(f"Purged {result.rowcount} expired admin session(s)")
        return result.rowcount
