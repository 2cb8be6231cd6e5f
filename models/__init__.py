# Инициализационный файл для пакета models.
# Импортируем все модели, чтобы SQLAlchemy могла их обнаружить.
from models.admin import Administrator, AdminRole
from models.admin_session import AdminSession
from models.audit_log import AuditLog, AuditAction, AuditResource
from models.user import User
from models.post import Post, PostStatus

__all__ = [
    'Administrator',
    'AdminRole',
    'AdminSession',
    'AuditLog',
    'AuditAction',
    'AuditResource',
    'User',
    'Post',
    'PostStatus',
]
