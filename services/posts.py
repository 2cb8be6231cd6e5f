from datetime import datetime
from sqlalchemy import select, desc, func
from core.exceptions import NotFoundException, ValidationException
from models.post import Post, PostStatus
from services.pagination import Page, paginate, search, SEARCH_RESULT_CAP

SEARCH_COLUMNS = (Post.title, Post.excerpt, Post.author)


class PostService:
    def __init__(self, storage, search_cap: int = SEARCH_RESULT_CAP):
        self.storage = storage
        self.search_cap = search_cap

    def _query(self, status: str = None):
        stmt = select(Post).order_by(desc(Post.date), desc(Post.id))
        if status:
            stmt = stmt.filter(Post.status == status)
        return stmt

    def list(self, page: int, limit: int, status: str = None) -> Page:
        return paginate(self.storage, self._query(status), page, limit)

    def search(self, term: str, status: str = None) -> Page:
        return search(self.storage, self._query(status), SEARCH_COLUMNS, term, cap=self.search_cap)

    def count(self, status: str = None) -> int:
        stmt = select(func.count(Post.id))
        if status:
            stmt = stmt.filter(Post.status == status)
        return self.storage.session.execute(stmt).scalar() or 0

    def published(self, limit: int = 10) -> list:
        return self.storage.session.execute(self._query(PostStatus.PUBLISHED).limit(limit)).scalars().all()

    def get(self, post_id: int) -> Post:
        post = self.storage.session.get(Post, post_id)
        if post is None:
            raise NotFoundException('Post not found')
        return post

    def create(self, title: str, excerpt: str, author: str, category: str,
               status: str = PostStatus.DRAFT, date: datetime = None, user_id: int = None) -> Post:
        title, author, category = (title or '').strip(), (author or '').strip(), (category or '').strip()
        if not title or not author or not category:
            raise ValidationException('Title, author and category are required')
        status = status or PostStatus.DRAFT
        if status not in PostStatus.ALL:
            raise ValidationException(f'Invalid status: {status}')

        post = Post(title=title, excerpt=(excerpt or '').strip(), author=author,
                    category=category, status=status, user_id=user_id)
        if date is not None:
            post.date = date
        self.storage.session.add(post)
        self.storage.session.flush()
        return post

    def update_status(self, post_id: int, status: str) -> Post:
        if status not in PostStatus.ALL:
            raise ValidationException(f'Invalid status: {status}')
        post = self.get(post_id)
        post.status = status
        self.storage.session.flush()
        return post

    def delete(self, post_id: int) -> None:
        post = self.get(post_id)
        self.storage.session.delete(post)
        self.storage.session.flush()
