from sqlalchemy import select, desc, func
from sqlalchemy.exc import IntegrityError
from core.exceptions import NotFoundException, ValidationException, ConflictException
from models.user import User
from services.pagination import Page, paginate, search, SEARCH_RESULT_CAP
from utils.validators import is_valid_email, normalize_email

SEARCH_COLUMNS = (User.name, User.email)


class UserService:
    def __init__(self, storage, search_cap: int = SEARCH_RESULT_CAP):
        self.storage = storage
        self.search_cap = search_cap

    def _query(self):
        return select(User).order_by(desc(User.created_at), desc(User.id))

    def list(self, page: int, limit: int) -> Page:
        return paginate(self.storage, self._query(), page, limit)

    def search(self, term: str) -> Page:
        return search(self.storage, self._query(), SEARCH_COLUMNS, term, cap=self.search_cap)

    def count(self, active: bool = None) -> int:
        stmt = select(func.count(User.id))
        if active is not None:
            stmt = stmt.filter(User.is_active.is_(active))
        return self.storage.session.execute(stmt).scalar() or 0

    def active(self, limit: int = 10) -> list:
        """Newest active users, for the public pages."""
        stmt = self._query().filter(User.is_active.is_(True)).limit(limit)
        return self.storage.session.execute(stmt).scalars().all()

    def get(self, user_id: int) -> User:
        user = self.storage.session.get(User, user_id)
        if user is None:
            raise NotFoundException('User not found')
        return user

    def create(self, name: str, email: str, role: str = 'User', avatar: str = None) -> User:
        name = (name or '').strip()
        email = normalize_email(email)
        if not name or not email:
            raise ValidationException('Name and email are required')
        if not is_valid_email(email):
            raise ValidationException('Please enter a valid email address')

        user = User(name=name, email=email, role=(role or 'User').strip() or 'User', avatar=avatar or None)
        self.storage.session.add(user)
        try:
            self.storage.session.flush()
        except IntegrityError:
            raise ConflictException('Email already exists')
        return user

    def toggle_active(self, user_id: int) -> User:
        user = self.get(user_id)
        user.is_active = not user.is_active
        self.storage.session.flush()
        return user

    def delete(self, user_id: int) -> None:
        user = self.get(user_id)
        self.storage.session.delete(user)
        self.storage.session.flush()
