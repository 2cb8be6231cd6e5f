from dataclasses import dataclass
from typing import Optional
from sqlalchemy import select, desc
from sqlalchemy.orm import selectinload
from core.logger import log
from models.audit_log import AuditLog
from services.pagination import Page, paginate

UNKNOWN_IP = 'unknown'


def client_ip(headers) -> str:
    """
    First hop of X-Forwarded-For, then X-Real-IP, then ``"unknown"``.
    """
    forwarded = headers.get('X-Forwarded-For')
    if forwarded:
        first_hop = forwarded.split(',')[0].strip()
        if first_hop:
            return first_hop
    real_ip = (headers.get('X-Real-IP') or '').strip()
    return real_ip or UNKNOWN_IP


@dataclass(frozen=True)
class RequestContext:
    """Provenance of an admin action."""
    ip_address: str = UNKNOWN_IP
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> 'RequestContext':
        return cls(
            ip_address=client_ip(request.headers),
            user_agent=request.headers.get('User-Agent') or None,
        )


class AuditRecorder:
    """Appends audit entries and reads them back for the audit-log screen."""

    def __init__(self, storage):
        self.storage = storage

    def record(self, actor_id: int, action: str, resource: str, resource_id: int = None,
               details: dict = None, context: RequestContext = None) -> AuditLog:
        """
        Adds an entry to the caller's transaction. Errors are not caught here:
        when this fails the surrounding transaction rolls back the action too.
        """
        context = context or RequestContext()
        entry = AuditLog(
            admin_id=actor_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            details=details,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        self.storage.session.add(entry)
        self.storage.session.flush()
        log.debug(f"Audit: admin #{actor_id} {action} {resource}#{resource_id} from {context.ip_address}")
        return entry

    def _query(self, action: str = None, resource: str = None):
        stmt = (
            select(AuditLog)
            .options(selectinload(AuditLog.admin))
            .order_by(desc(AuditLog.created_at), desc(AuditLog.id))
        )
        if action:
            stmt = stmt.filter(AuditLog.action == action)
        if resource:
            stmt = stmt.filter(AuditLog.resource == resource)
        return stmt

    def list(self, page: int, limit: int, action: str = None, resource: str = None) -> Page:
        return paginate(self.storage, self._query(action, resource), page, limit)

    def entries(self, action: str = None, resource: str = None) -> list:
        return self.storage.session.execute(self._query(action, resource)).scalars().all()

    def recent(self, limit: int = 5) -> list:
        return self.storage.session.execute(self._query().limit(limit)).scalars().all()
