"""
Shared fixtures: a Flask app on a temporary SQLite file, a test client
and administrator accounts of both tiers.

HTTP tests run without an app context pushed so every request gets a fresh
one (and a fresh ``g``, where Flask-Login caches the current user). Tests
that talk to services directly use the ``svc`` fixture, which keeps an app
context open for the whole test.
"""
import os
import tempfile
import pytest
from web.app import create_app
from web.extensions import db as _db, services as _services
from models.admin import Administrator, AdminRole

PASSWORD = 'correct-horse-battery'
ROOT_EMAIL = 'root@example.com'
EDITOR_EMAIL = 'editor@example.com'


@pytest.fixture
def app():
    """Create a Flask test application backed by a temporary SQLite file.

    A file-based database avoids the connection-sharing caveat of SQLite
    in-memory databases, ensuring that tables created in fixture setup are
    visible across all sessions/connections during the test.
    """
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    test_app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'BCRYPT_ROUNDS': 4,
        'ADMIN_EMAIL': '',
        'ADMIN_PASSWORD_HASH': '',
    })
    yield test_app
    with test_app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def svc(app):
    with app.app_context():
        yield _services()


def make_admin(email, role=AdminRole.ADMIN, is_active=True, name=None, password=PASSWORD):
    """Insert an administrator (needs an app context). Returns its id."""
    admin = Administrator(name=name or email.split('@')[0], email=email, role=role, is_active=is_active)
    admin.set_password(password, rounds=4)
    _db.session.add(admin)
    _db.session.commit()
    return admin.id


@pytest.fixture
def super_admin(app):
    with app.app_context():
        return make_admin(ROOT_EMAIL, role=AdminRole.SUPER_ADMIN, name='Root')


@pytest.fixture
def standard_admin(app):
    with app.app_context():
        return make_admin(EDITOR_EMAIL, role=AdminRole.ADMIN, name='Editor')


def login(client, email, password=PASSWORD, headers=None):
    return client.post('/admin/login', data={'email': email, 'password': password},
                       headers=headers or {}, follow_redirects=False)


@pytest.fixture
def super_client(client, super_admin):
    resp = login(client, ROOT_EMAIL)
    assert resp.status_code == 302
    return client


@pytest.fixture
def standard_client(client, standard_admin):
    resp = login(client, EDITOR_EMAIL)
    assert resp.status_code == 302
    return client
