from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base


class PostStatus:
    DRAFT = 'DRAFT'
    PUBLISHED = 'PUBLISHED'
    ARCHIVED = 'ARCHIVED'

    ALL = (DRAFT, PUBLISHED, ARCHIVED)


class Post(Base):
    __tablename__ = 'posts'

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    excerpt = Column(Text, nullable=False, default='')
    author = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    date = Column(DateTime, server_default=func.now())
    status = Column(String(20), nullable=False, default=PostStatus.DRAFT, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    user = relationship('User', back_populates='posts')

    def __repr__(self):
        return f"<Post {self.title}>"
