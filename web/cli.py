"""
Flask CLI commands: ``flask create-admin``, ``flask hash-password``,
``flask seed`` and ``flask purge-sessions``.
"""
import datetime
import click
from sqlalchemy import select
from core.exceptions import ValidationException
from core.logger import log
from models.admin import AdminRole
from models.post import Post, PostStatus
from models.user import User
from services.auth import hash_password
from web.extensions import services

SEED_USERS = [
    {'name': 'John Doe', 'email': 'john@example.com', 'role': 'Admin',
     'avatar': 'https://ui-avatars.com/api/?name=John+Doe&background=3b82f6&color=fff'},
    {'name': 'Jane Smith', 'email': 'jane@example.com', 'role': 'User',
     'avatar': 'https://ui-avatars.com/api/?name=Jane+Smith&background=10b981&color=fff'},
    {'name': 'Bob Johnson', 'email': 'bob@example.com', 'role': 'User',
     'avatar': 'https://ui-avatars.com/api/?name=Bob+Johnson&background=f59e0b&color=fff'},
]

SEED_POSTS = [
    {'title': 'Getting Started with Flask',
     'excerpt': 'Learn how to build server-rendered web applications with Flask...',
     'author': 'John Doe', 'date': datetime.datetime(2024, 1, 15), 'category': 'Tutorial',
     'user_email': 'john@example.com'},
    {'title': 'Python Typing Best Practices',
     'excerpt': 'Explore type hints and patterns for more maintainable code...',
     'author': 'Jane Smith', 'date': datetime.datetime(2024, 1, 20), 'category': 'Development',
     'user_email': 'jane@example.com'},
    {'title': 'Tailwind CSS Tips',
     'excerpt': 'Discover useful Tailwind CSS utilities and customization options...',
     'author': 'Bob Johnson', 'date': datetime.datetime(2024, 1, 25), 'category': 'Design',
     'user_email': 'bob@example.com'},
]


def seed_database(storage) -> tuple:
    """Upserts the demo users and posts. Returns ``(users_created, posts_created)``."""
    session = storage.session
    users_created = posts_created = 0
    with storage.transaction():
        by_email = {}
        for data in SEED_USERS:
            user = session.execute(select(User).filter_by(email=data['email'])).scalar_one_or_none()
            if user is None:
                user = User(email=data['email'])
                session.add(user)
                users_created += 1
            user.name, user.role, user.avatar = data['name'], data['role'], data['avatar']
            by_email[data['email']] = user
        session.flush()

        for data in SEED_POSTS:
            post = session.execute(select(Post).filter_by(title=data['title'])).scalar_one_or_none()
            if post is None:
                post = Post(title=data['title'])
                session.add(post)
                posts_created += 1
            post.excerpt, post.author, post.category = data['excerpt'], data['author'], data['category']
            post.date = data['date']
            post.status = PostStatus.PUBLISHED
            post.user_id = by_email[data['user_email']].id
    return users_created, posts_created


def register_commands(app):
    @app.cli.command('create-admin')
    @click.option('--name', prompt=True)
    @click.option('--email', prompt=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option('--role', type=click.Choice(AdminRole.ALL), default=AdminRole.SUPER_ADMIN, show_default=True)
    def create_admin(name, email, password, role):
        """Create an administrator account."""
        svc = services()
        try:
            with svc.storage.transaction():
                admin = svc.admins.create(name, email, password, role=role)
        except ValidationException as e:
            raise click.ClickException(e.message)
        click.echo(f"Administrator {admin.email} created with role {admin.role}")

    @app.cli.command('hash-password')
    @click.password_option()
    def hash_password_command(password):
        """Print a bcrypt hash suitable for ADMIN_PASSWORD_HASH."""
        click.echo(hash_password(password, rounds=app.config['BCRYPT_ROUNDS']))

    @app.cli.command('seed')
    def seed():
        """Insert demo users and posts."""
        users_created, posts_created = seed_database(services().storage)
        log.info(f"Seed finished: {users_created} users, {posts_created} posts created")
        click.echo(f"Database has been seeded ({users_created} users, {posts_created} posts created)")

    @app.cli.command('purge-sessions')
    def purge_sessions():
        """Delete expired admin session records."""
        purged = services().auth.purge_expired_sessions()
        click.echo(f"Purged {purged} expired session(s)")

