import os
from datetime import timedelta
from dotenv import load_dotenv

# Загружаем переменные окружения из .env файла
load_dotenv()


class Config:
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY') or os.getenv('SESSION_SECRET')
    FLASK_ENV = os.getenv('FLASK_ENV', 'production')
    DEBUG = os.getenv('FLASK_DEBUG', '0').lower() in ('true', '1', 't')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///data.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie (signed by Flask with SECRET_KEY)
    SESSION_COOKIE_NAME = 'admin_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = FLASK_ENV == 'production'
    SESSION_TTL_DAYS = int(os.getenv('SESSION_TTL_DAYS', 30))
    PERMANENT_SESSION_LIFETIME = timedelta(days=SESSION_TTL_DAYS)

    # Passwords
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', 12))
    MIN_PASSWORD_LENGTH = 8

    # Admin (initial)
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', '')
    ADMIN_NAME = os.getenv('ADMIN_NAME', 'Administrator')
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH', '')

    # Listings
    USERS_PER_PAGE = int(os.getenv('USERS_PER_PAGE', 10))
    POSTS_PER_PAGE = int(os.getenv('POSTS_PER_PAGE', 10))
    ADMINS_PER_PAGE = int(os.getenv('ADMINS_PER_PAGE', 10))
    AUDIT_LOGS_PER_PAGE = int(os.getenv('AUDIT_LOGS_PER_PAGE', 20))
    SEARCH_RESULT_CAP = int(os.getenv('SEARCH_RESULT_CAP', 20))

    # Security
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    LOGIN_RATE_LIMIT = os.getenv('LOGIN_RATE_LIMIT', '10 per minute')

    # Redis / Celery
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', REDIS_URL)
    CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', REDIS_URL)

    # Paths
    BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    LOGS_DIR = os.getenv('LOGS_DIR', os.path.join(BASE_DIR, 'logs'))

    os.makedirs(LOGS_DIR, exist_ok=True)
