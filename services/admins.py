from sqlalchemy import select, desc, func
from sqlalchemy.exc import IntegrityError
from core.exceptions import NotFoundException, ValidationException, ConflictException
from models.admin import Administrator, AdminRole
from services.pagination import Page, paginate, search, SEARCH_RESULT_CAP
from utils.validators import is_valid_email, normalize_email

SEARCH_COLUMNS = (Administrator.name, Administrator.email)


class AdminService:
    """Administrator accounts. Only super admins reach these operations."""

    def __init__(self, storage, bcrypt_rounds: int = 12, min_password_length: int = 8,
                 search_cap: int = SEARCH_RESULT_CAP):
        self.storage = storage
        self.bcrypt_rounds = bcrypt_rounds
        self.min_password_length = min_password_length
        self.search_cap = search_cap

    def _query(self):
        return select(Administrator).order_by(desc(Administrator.created_at), desc(Administrator.id))

    def list(self, page: int, limit: int) -> Page:
        return paginate(self.storage, self._query(), page, limit)

    def search(self, term: str) -> Page:
        return search(self.storage, self._query(), SEARCH_COLUMNS, term, cap=self.search_cap)

    def count(self) -> int:
        return self.storage.session.execute(select(func.count(Administrator.id))).scalar() or 0

    def get(self, admin_id: int) -> Administrator:
        admin = self.storage.session.get(Administrator, admin_id)
        if admin is None:
            raise NotFoundException('Admin not found')
        return admin

    def create(self, name: str, email: str, password: str, role: str = AdminRole.ADMIN) -> Administrator:
        name = (name or '').strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationException('All fields are required')
        if not is_valid_email(email):
            raise ValidationException('Please enter a valid email address')
        if len(password) < self.min_password_length:
            raise ValidationException(f'Password must be at least {self.min_password_length} characters long')
        if role not in AdminRole.ALL:
            role = AdminRole.ADMIN

        admin = Administrator(name=name, email=email, role=role, is_active=True)
        admin.set_password(password, rounds=self.bcrypt_rounds)
        self.storage.session.add(admin)
        try:
            self.storage.session.flush()
        except IntegrityError:
            raise ConflictException('Email already exists')
        return admin

    def toggle_active(self, admin_id: int, actor_id: int) -> Administrator:
        if admin_id == actor_id:
            raise ValidationException('Cannot deactivate your own account')
        admin = self.get(admin_id)
        admin.is_active = not admin.is_active
        self.storage.session.flush()
        return admin

    def update_role(self, admin_id: int, role: str) -> Administrator:
        if role not in AdminRole.ALL:
            raise ValidationException(f'Invalid role: {role}')
        admin = self.get(admin_id)
        admin.role = role
        self.storage.session.flush()
        return admin

    def delete(self, admin_id: int, actor_id: int) -> None:
        """Removes the account; its session records go with it."""
        if admin_id == actor_id:
            raise ValidationException('Cannot delete your own account')
        admin = self.get(admin_id)
        self.storage.session.delete(admin)
        self.storage.session.flush()
