from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base


class AdminSession(Base):
    """
    Server-side record of a login. The signed cookie names the token;
    the record decides whether that token is still good.
    """
    __tablename__ = 'admin_sessions'

    id = Column(Integer, primary_key=True)
    admin_id = Column(Integer, ForeignKey('admins.id', ondelete='CASCADE'), nullable=False, index=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    admin = relationship('Administrator', back_populates='sessions')

    def __repr__(self):
        return f"<AdminSession admin={self.admin_id} expires={self.expires_at}>"
