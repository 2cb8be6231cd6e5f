from datetime import timedelta
from services.admins import AdminService
from services.audit import AuditRecorder
from services.auth import AuthGate
from services.posts import PostService
from services.users import UserService


class AppServices:
    """Every component of one application, wired to the same storage handle."""

    def __init__(self, storage, config):
        search_cap = config.get('SEARCH_RESULT_CAP', 20)
        bcrypt_rounds = config.get('BCRYPT_ROUNDS', 12)

        self.storage = storage
        self.auth = AuthGate(
            storage,
            session_ttl=timedelta(days=config.get('SESSION_TTL_DAYS', 30)),
        )
        self.audit = AuditRecorder(storage)
        self.users = UserService(storage, search_cap=search_cap)
        self.posts = PostService(storage, search_cap=search_cap)
        self.admins = AdminService(
            storage,
            bcrypt_rounds=bcrypt_rounds,
            min_password_length=config.get('MIN_PASSWORD_LENGTH', 8),
            search_cap=search_cap,
        )
