from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import bcrypt


class AdminRole:
    """Role tiers. SUPER_ADMIN satisfies every check that ADMIN does."""
    ADMIN = 'ADMIN'
    SUPER_ADMIN = 'SUPER_ADMIN'

    ALL = (ADMIN, SUPER_ADMIN)


class Administrator(Base):
    """
    Учётная запись администратора панели.
    Хеш пароля не покидает модель: наружу отдаются объекты ``AdminPrincipal``.
    """
    __tablename__ = 'admins'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False, default=AdminRole.ADMIN)
    avatar = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Session records go away together with their administrator
    sessions = relationship('AdminSession', back_populates='admin',
                            cascade='all, delete-orphan')

    def set_password(self, password: str, rounds: int = 12):
        """Хеширование пароля при создании или смене"""
        salt = bcrypt.gensalt(rounds=rounds)
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def check_password(self, password: str) -> bool:
        """Проверка введенного пароля против хеша в базе"""
        if not self.password_hash or not password:
            return False
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN

    def __repr__(self):
        return f"<Administrator {self.email}>"
