from contextlib import contextmanager
from sqlalchemy.orm import declarative_base
from core.logger import log

# Базовый класс для моделей
Base = declarative_base()


class Storage:
    """
    Storage handle shared by every service.

    Wraps the Flask-SQLAlchemy extension bound to one application. It is
    built once in ``create_app`` and handed to each component, so nothing
    reaches for a module-level database client.
    """

    def __init__(self, db, engine=None):
        self.db = db
        self.engine = engine

    @property
    def session(self):
        return self.db.session

    @contextmanager
    def transaction(self):
        """
        Commit everything done inside the block, or roll it all back.
        Not reentrant: services never open a transaction of their own
        while a route holds one.
        """
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def paginate(self, stmt, page: int, limit: int):
        return self.db.paginate(stmt, page=page, per_page=limit, error_out=False, max_per_page=None)

    def dispose(self):
        """Release pooled connections; registered for process exit."""
        if self.engine is not None:
            self.engine.dispose()
            log.info("Database engine disposed")
