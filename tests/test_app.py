"""
Tests for application setup: configuration checks, error mapping,
CLI commands and the session cleanup task.
"""
from datetime import timedelta
import bcrypt
import pytest
from sqlalchemy import select, func
from web.app import create_app
from web.cli import seed_database, SEED_USERS, SEED_POSTS
from web.extensions import db
from core.exceptions import ConfigurationException, AuthorizationException, NotFoundException
from models.admin import Administrator, AdminRole
from models.admin_session import AdminSession
from models.post import Post
from models.user import User
from services.auth import hash_password
from utils.helpers import utcnow
from conftest import make_admin, login


def _config(tmp_path, **overrides):
    config = {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{tmp_path / "app.db"}',
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'ADMIN_EMAIL': '',
        'ADMIN_PASSWORD_HASH': '',
    }
    config.update(overrides)
    return config


def _dispose(app):
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


class TestConfiguration:
    @pytest.mark.parametrize('secret', [None, ''])
    def test_missing_secret_key_refuses_to_start(self, tmp_path, secret):
        with pytest.raises(ConfigurationException):
            create_app(_config(tmp_path, SECRET_KEY=secret))

    def test_initial_super_admin_from_environment(self, tmp_path):
        app = create_app(_config(
            tmp_path,
            ADMIN_EMAIL='Owner@Example.com',
            ADMIN_NAME='Owner',
            ADMIN_PASSWORD_HASH=hash_password('owner-password', rounds=4),
        ))
        with app.app_context():
            admin = db.session.execute(select(Administrator)).scalar_one()
            assert admin.email == 'owner@example.com'
            assert admin.role == AdminRole.SUPER_ADMIN

        client = app.test_client()
        assert login(client, 'owner@example.com', 'owner-password').status_code == 302
        assert client.get('/admin/admins').status_code == 200
        _dispose(app)

    def test_initial_admin_is_not_created_twice(self, tmp_path):
        config = _config(tmp_path, ADMIN_EMAIL='owner@example.com',
                         ADMIN_PASSWORD_HASH=hash_password('owner-password', rounds=4))
        _dispose(create_app(config))
        app = create_app(config)
        with app.app_context():
            assert db.session.execute(select(func.count(Administrator.id))).scalar() == 1
        _dispose(app)


class TestErrorMapping:
    def test_app_exceptions_become_json(self, app, client):
        @app.route('/boom/<kind>')
        def boom(kind):
            if kind == 'forbidden':
                raise AuthorizationException()
            raise NotFoundException('Nothing here')

        resp = client.get('/boom/forbidden')
        assert resp.status_code == 403
        assert resp.get_json() == {'success': False, 'error': 'Access denied'}

        resp = client.get('/boom/missing')
        assert resp.status_code == 404
        assert resp.get_json() == {'success': False, 'error': 'Nothing here'}


class TestSeed:
    def test_seed_is_idempotent(self, svc):
        assert seed_database(svc.storage) == (len(SEED_USERS), len(SEED_POSTS))
        assert seed_database(svc.storage) == (0, 0)

        assert db.session.execute(select(func.count(User.id))).scalar() == len(SEED_USERS)
        posts = db.session.execute(select(Post)).scalars().all()
        assert len(posts) == len(SEED_POSTS)
        assert all(p.status == 'PUBLISHED' and p.user_id is not None for p in posts)

    def test_seed_command(self, app):
        result = app.test_cli_runner().invoke(args=['seed'])
        assert result.exit_code == 0
        assert 'Database has been seeded' in result.output


class TestCommands:
    def test_create_admin(self, app):
        result = app.test_cli_runner().invoke(args=[
            'create-admin', '--name', 'Ops', '--email', 'ops@example.com',
            '--password', 'long-enough-pw',
        ])
        assert result.exit_code == 0, result.output
        assert 'ops@example.com' in result.output
        with app.app_context():
            admin = db.session.execute(select(Administrator).filter_by(email='ops@example.com')).scalar_one()
            assert admin.role == AdminRole.SUPER_ADMIN
            assert admin.check_password('long-enough-pw')

    def test_create_admin_rejects_short_password(self, app):
        result = app.test_cli_runner().invoke(args=[
            'create-admin', '--name', 'Ops', '--email', 'ops@example.com', '--password', 'short',
        ])
        assert result.exit_code != 0
        assert 'at least 8 characters' in result.output

    def test_hash_password(self, app):
        result = app.test_cli_runner().invoke(args=['hash-password', '--password', 'owner-password'])
        assert result.exit_code == 0
        hashed = result.output.strip().encode('utf-8')
        assert bcrypt.checkpw(b'owner-password', hashed)

    def test_purge_sessions(self, app):
        with app.app_context():
            admin_id = make_admin('alice@example.com')
            db.session.add(AdminSession(admin_id=admin_id, token='stale',
                                        expires_at=utcnow() - timedelta(hours=1)))
            db.session.add(AdminSession(admin_id=admin_id, token='fresh',
                                        expires_at=utcnow() + timedelta(hours=1)))
            db.session.commit()

        result = app.test_cli_runner().invoke(args=['purge-sessions'])
        assert result.exit_code == 0
        assert 'Purged 1 expired session(s)' in result.output


class TestCleanupTask:
    def test_purge_task(self, app, monkeypatch):
        import tasks.cleanup as cleanup

        with app.app_context():
            admin_id = make_admin('alice@example.com')
            db.session.add(AdminSession(admin_id=admin_id, token='stale',
                                        expires_at=utcnow() - timedelta(days=1)))
            db.session.commit()

        monkeypatch.setattr(cleanup, '_worker_app', app)
        assert cleanup.purge_expired_sessions() == {'purged': 1}
        with app.app_context():
            assert db.session.execute(select(func.count(AdminSession.id))).scalar() == 0

    def test_worker_app_is_built_once(self, app, monkeypatch):
        import tasks.cleanup as cleanup
        import web.app as web_app

        hooks = []
        real_create_app = web_app.create_app
        monkeypatch.setattr(web_app.atexit, 'register', hooks.append)
        monkeypatch.setattr(web_app, 'create_app', lambda: real_create_app(dict(app.config)))
        monkeypatch.setattr(cleanup, '_worker_app', None)

        assert cleanup.purge_expired_sessions() == {'purged': 0}
        assert cleanup.purge_expired_sessions() == {'purged': 0}
        assert len(hooks) == 1
        assert cleanup.get_worker_app() is cleanup.get_worker_app()
        hooks[0]()

    def test_failure_is_reraised(self, app, monkeypatch):
        import tasks.cleanup as cleanup
        from services.auth import AuthGate

        def broken(self, now=None):
            raise RuntimeError('database is locked')

        monkeypatch.setattr(cleanup, '_worker_app', app)
        monkeypatch.setattr(AuthGate, 'purge_expired_sessions', broken)
        with pytest.raises(RuntimeError):
            cleanup.purge_expired_sessions()
