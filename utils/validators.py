import re

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def is_valid_email(email: str) -> bool:
    """Проверяет, похожа ли строка на email-адрес (user@host.tld)."""
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def normalize_email(email: str) -> str:
    """Emails are stored and looked up trimmed and lower-cased."""
    return (email or '').strip().lower()
