from functools import wraps
from flask import g, redirect, url_for
from flask_login import current_user
from models.admin import AdminRole
from services.auth import Granted, Unauthenticated
from web.extensions import services


def load_user(identity):
    """
    Функция загрузки пользователя для Flask-Login.
    ``identity`` берётся из подписанной cookie сессии.
    """
    return services().auth.resolve_session(identity)


def current_admin():
    if current_user and current_user.is_authenticated:
        return current_user._get_current_object()
    return None


def require_authenticated():
    return services().auth.check_access(current_admin(), AdminRole.ADMIN)


def require_role(role: str):
    return services().auth.check_access(current_admin(), role)


def _denied_response(outcome):
    if isinstance(outcome, Unauthenticated):
        return redirect(url_for('admin.login'))
    return redirect(url_for('admin.dashboard', error='insufficient_permissions'))


def _guard(check):
    def decorator(func):
        @wraps(func)
        def decorated_view(*args, **kwargs):
            outcome = check()
            if not isinstance(outcome, Granted):
                return _denied_response(outcome)
            g.admin = outcome.admin
            return func(*args, **kwargs)
        return decorated_view
    return decorator


def admin_required(func):
    """
    Декоратор для маршрутов админ-панели.
    Анонимных посетителей отправляет на страницу входа, обработчик не вызывается.
    """
    return _guard(require_authenticated)(func)


def superadmin_required(func):
    """
    Декоратор для маршрутов, требующих прав суперадминистратора.
    Обычных администраторов возвращает на дашборд с флагом ошибки.
    """
    return _guard(lambda: require_role(AdminRole.SUPER_ADMIN))(func)
