from sqlalchemy import Column, Integer, String, DateTime, JSON, event
from sqlalchemy.orm import Session, relationship
from core.database import Base
from core.exceptions import AuditLogImmutableError
from utils.helpers import utcnow


class AuditAction:
    LOGIN = 'LOGIN'
    CREATE = 'CREATE'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'
    ACTIVATE = 'ACTIVATE'
    DEACTIVATE = 'DEACTIVATE'

    ALL = (LOGIN, CREATE, UPDATE, DELETE, ACTIVATE, DEACTIVATE)


class AuditResource:
    ADMIN = 'ADMIN'
    USER = 'USER'
    POST = 'POST'

    ALL = (ADMIN, USER, POST)


class AuditLog(Base):
    """
    Append-only log of administrator actions. Rows are inserted by
    ``AuditRecorder`` and never updated or deleted. ``admin_id`` has no
    foreign key so entries outlive the actor.
    """
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    admin_id = Column(Integer, nullable=False, index=True)            # кто совершил действие
    action = Column(String(50), nullable=False, index=True)           # LOGIN, CREATE, DELETE, ...
    resource = Column(String(50), nullable=False, index=True)         # ADMIN, USER, POST
    resource_id = Column(Integer, nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=False)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    admin = relationship(
        'Administrator',
        primaryjoin='foreign(AuditLog.admin_id) == Administrator.id',
        viewonly=True,
    )

    def __repr__(self):
        return f"<AuditLog {self.action} {self.resource}#{self.resource_id} by {self.admin_id}>"


@event.listens_for(AuditLog, 'before_update')
def _reject_update(mapper, connection, target):
    raise AuditLogImmutableError()


@event.listens_for(AuditLog, 'before_delete')
def _reject_delete(mapper, connection, target):
    raise AuditLogImmutableError()


@event.listens_for(Session, 'do_orm_execute')
def _reject_bulk_changes(orm_execute_state):
    # Bulk update()/delete() statements skip the mapper events above
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    mapper = orm_execute_state.bind_mapper
    if mapper is not None and mapper.class_ is AuditLog:
        raise AuditLogImmutableError()
