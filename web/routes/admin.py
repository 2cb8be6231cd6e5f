import datetime
from flask import Blueprint, render_template, redirect, url_for, request, flash, jsonify, send_file, session, g, current_app
from flask_login import login_user, logout_user, current_user
from core.exceptions import AppException, ValidationException
from core.logger import log
from models.admin import AdminRole
from models.audit_log import AuditAction, AuditResource
from models.post import PostStatus
from services.audit import RequestContext
from web.extensions import limiter, services
from web.middlewares.auth import admin_required, superadmin_required, current_admin
from utils.helpers import parse_page

admin_bp = Blueprint('admin', __name__)


# --- helpers ---
def _form_int(name):
    try:
        return int(request.form.get(name, ''))
    except ValueError:
        raise ValidationException(f'{name} must be a number')


def _audit(action, resource, resource_id=None, details=None):
    """Adds an audit entry for the signed-in admin to the open transaction."""
    return services().audit.record(
        g.admin.id, action, resource, resource_id,
        details=details, context=RequestContext.from_request(request),
    )


def _wants_json():
    """True only when the client prefers JSON over HTML (fetch/XHR callers)."""
    return request.accept_mimetypes.best_match(['text/html', 'application/json']) == 'application/json'


def _dispatch(handlers, endpoint, render_listing):
    """
    Runs the handler named by the form's ``intent``.

    A handler returns ``(flash message, JSON payload)``. Browsers are sent
    back to the listing they posted from, with its page/search/status query
    kept; a failed action re-renders that listing with the error next to the
    forms. JSON callers get ``{"success": ..., ...}`` instead.
    """
    handler = handlers.get(request.form.get('intent', ''))
    try:
        if handler is None:
            raise ValidationException('Invalid action')
        message, payload = handler()
    except AppException as e:
        if _wants_json():
            return jsonify({'success': False, 'error': e.message}), e.status_code
        return render_listing(form_error=e.message, form=request.form), e.status_code

    if _wants_json():
        return jsonify({'success': True, **payload})
    flash(message, 'success')
    return redirect(url_for(endpoint, **request.args.to_dict()))


def _listing_args():
    return parse_page(request.args.get('page')), request.args.get('search', '').strip()


# ==========================================
# 1. АВТОРИЗАЦИЯ
# ==========================================
@admin_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(lambda: current_app.config['LOGIN_RATE_LIMIT'], methods=['POST'])
def login():
    if current_admin() is not None:
        return redirect(url_for('admin.dashboard'))

    if request.method == 'POST':
        email = request.form.get('email', '')
        password = request.form.get('password', '')

        principal = services().auth.authenticate(email, password)
        if principal is None:
            flash('Invalid email or password', 'danger')
            return render_template('admin/login.html', email=email)

        svc = services()
        with svc.storage.transaction():
            principal = svc.auth.open_session(principal)
            svc.audit.record(
                principal.id, AuditAction.LOGIN, AuditResource.ADMIN, principal.id,
                context=RequestContext.from_request(request),
            )

        session.clear()
        login_user(principal)
        session.permanent = True
        return redirect(url_for('admin.dashboard'))

    return render_template('admin/login.html')


@admin_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    if request.method == 'GET':
        return redirect(url_for('admin.dashboard'))
    if current_user.is_authenticated:
        services().auth.end_session(current_user.get_id())
    logout_user()
    session.clear()
    return redirect(url_for('admin.login'))


# ==========================================
# 2. ГЛАВНАЯ СТРАНИЦА (DASHBOARD)
# ==========================================
@admin_bp.route('/')
@admin_bp.route('/dashboard')
@admin_required
def dashboard():
    svc = services()
    stats = {
        'users': svc.users.count(),
        'active_users': svc.users.count(active=True),
        'posts': svc.posts.count(),
        'published_posts': svc.posts.count(status=PostStatus.PUBLISHED),
        'admins': svc.admins.count(),
    }
    return render_template('admin/dashboard.html',
                           admin=g.admin,
                           stats=stats,
                           recent_logs=svc.audit.recent(5),
                           error=request.args.get('error'))


# ==========================================
# 3. ПОЛЬЗОВАТЕЛИ
# ==========================================
def _render_users(form_error=None, form=None):
    page, search = _listing_args()
    svc = services().users
    if search:
        result = svc.search(search)
    else:
        result = svc.list(page, current_app.config['USERS_PER_PAGE'])
    return render_template('admin/users.html', admin=g.admin, users=result, search_query=search,
                           form_error=form_error, form=form or {})


@admin_bp.route('/users', methods=['GET'])
@admin_required
def users():
    return _render_users()


@admin_bp.route('/users', methods=['POST'])
@admin_required
def users_action():
    svc = services()

    def create():
        with svc.storage.transaction():
            user = svc.users.create(
                request.form.get('name'), request.form.get('email'),
                role=request.form.get('role') or 'User', avatar=request.form.get('avatar'),
            )
            _audit(AuditAction.CREATE, AuditResource.USER, user.id,
                   {'name': user.name, 'email': user.email, 'role': user.role})
        return f'User {user.email} created', {'message': 'User created successfully', 'id': user.id}

    def toggle_active():
        user_id = _form_int('userId')
        with svc.storage.transaction():
            user = svc.users.toggle_active(user_id)
            is_active = user.is_active
            _audit(AuditAction.ACTIVATE if is_active else AuditAction.DEACTIVATE,
                   AuditResource.USER, user_id, {'isActive': is_active})
        return f"User {'activated' if is_active else 'deactivated'}", {'isActive': is_active}

    def delete():
        user_id = _form_int('userId')
        with svc.storage.transaction():
            svc.users.delete(user_id)
            _audit(AuditAction.DELETE, AuditResource.USER, user_id, {})
        return 'User deleted', {}

    return _dispatch({
        'create': create,
        'toggle-active': toggle_active,
        'delete': delete,
    }, 'admin.users', _render_users)


# ==========================================
# 4. ПУБЛИКАЦИИ
# ==========================================
def _render_posts(form_error=None, form=None):
    page, search = _listing_args()
    status = request.args.get('status', '').strip()
    if status not in PostStatus.ALL:
        status = ''
    svc = services().posts
    if search:
        result = svc.search(search, status=status or None)
    else:
        result = svc.list(page, current_app.config['POSTS_PER_PAGE'], status=status or None)
    return render_template('admin/posts.html', admin=g.admin, posts=result,
                           search_query=search, status_filter=status, statuses=PostStatus.ALL,
                           form_error=form_error, form=form or {})


@admin_bp.route('/posts', methods=['GET'])
@admin_required
def posts():
    return _render_posts()


@admin_bp.route('/posts', methods=['POST'])
@admin_required
def posts_action():
    svc = services()

    def create():
        date = None
        raw_date = request.form.get('date', '').strip()
        if raw_date:
            try:
                date = datetime.datetime.strptime(raw_date, '%Y-%m-%d')
            except ValueError:
                raise ValidationException('date must be YYYY-MM-DD')
        with svc.storage.transaction():
            post = svc.posts.create(
                request.form.get('title'), request.form.get('excerpt'),
                request.form.get('author'), request.form.get('category'),
                status=request.form.get('status') or PostStatus.DRAFT, date=date,
            )
            _audit(AuditAction.CREATE, AuditResource.POST, post.id,
                   {'title': post.title, 'status': post.status})
        return f'Post "{post.title}" created', {'message': 'Post created successfully', 'id': post.id}

    def update_status():
        post_id = _form_int('postId')
        status = request.form.get('status', '')
        with svc.storage.transaction():
            svc.posts.update_status(post_id, status)
            _audit(AuditAction.UPDATE, AuditResource.POST, post_id, {'status': status})
        return f'Post status changed to {status}', {'status': status}

    def delete():
        post_id = _form_int('postId')
        with svc.storage.transaction():
            svc.posts.delete(post_id)
            _audit(AuditAction.DELETE, AuditResource.POST, post_id, {})
        return 'Post deleted', {}

    return _dispatch({
        'create': create,
        'update-status': update_status,
        'delete': delete,
    }, 'admin.posts', _render_posts)


# ==========================================
# 5. АДМИНИСТРАТОРЫ (только SUPER_ADMIN)
# ==========================================
def _render_admins(form_error=None, form=None):
    page, search = _listing_args()
    svc = services().admins
    if search:
        result = svc.search(search)
    else:
        result = svc.list(page, current_app.config['ADMINS_PER_PAGE'])
    return render_template('admin/admins.html', admin=g.admin, admins=result,
                           search_query=search, roles=AdminRole.ALL,
                           form_error=form_error, form=form or {})


@admin_bp.route('/admins', methods=['GET'])
@superadmin_required
def admins():
    return _render_admins()


@admin_bp.route('/admins', methods=['POST'])
@superadmin_required
def admins_action():
    svc = services()

    def create():
        role = request.form.get('role') or AdminRole.ADMIN
        with svc.storage.transaction():
            new_admin = svc.admins.create(
                request.form.get('name'), request.form.get('email'),
                request.form.get('password'), role=role,
            )
            _audit(AuditAction.CREATE, AuditResource.ADMIN, new_admin.id,
                   {'name': new_admin.name, 'email': new_admin.email, 'role': new_admin.role})
        log.info(f"Admin {new_admin.email} created by #{g.admin.id}")
        return f'Admin {new_admin.email} created', {'message': 'Admin created successfully', 'id': new_admin.id}

    def toggle_active():
        admin_id = _form_int('adminId')
        with svc.storage.transaction():
            target = svc.admins.toggle_active(admin_id, actor_id=g.admin.id)
            is_active = target.is_active
            _audit(AuditAction.ACTIVATE if is_active else AuditAction.DEACTIVATE,
                   AuditResource.ADMIN, admin_id, {'isActive': is_active})
        return f"Admin {'activated' if is_active else 'deactivated'}", {'isActive': is_active}

    def update_role():
        admin_id = _form_int('adminId')
        role = request.form.get('role', '')
        with svc.storage.transaction():
            svc.admins.update_role(admin_id, role)
            _audit(AuditAction.UPDATE, AuditResource.ADMIN, admin_id, {'role': role})
        return f'Role changed to {role}', {'role': role}

    def delete():
        admin_id = _form_int('adminId')
        with svc.storage.transaction():
            svc.admins.delete(admin_id, actor_id=g.admin.id)
            _audit(AuditAction.DELETE, AuditResource.ADMIN, admin_id, {})
        log.info(f"Admin #{admin_id} deleted by #{g.admin.id}")
        return 'Admin deleted', {}

    return _dispatch({
        'create': create,
        'toggle-active': toggle_active,
        'update-role': update_role,
        'delete': delete,
    }, 'admin.admins', _render_admins)


# ==========================================
# 6. ЖУРНАЛ АУДИТА
# ==========================================
def _audit_filters():
    action = request.args.get('action', '').strip().upper()
    resource = request.args.get('resource', '').strip().upper()
    return (action if action in AuditAction.ALL else ''), (resource if resource in AuditResource.ALL else '')


@admin_bp.route('/audit-logs')
@admin_required
def audit_logs():
    page = parse_page(request.args.get('page'))
    action, resource = _audit_filters()
    result = services().audit.list(page, current_app.config['AUDIT_LOGS_PER_PAGE'],
                                   action=action or None, resource=resource or None)
    return render_template('admin/audit_logs.html', admin=g.admin, logs=result,
                           action_filter=action, resource_filter=resource,
                           actions=AuditAction.ALL, resources=AuditResource.ALL)


@admin_bp.route('/audit-logs/export')
@admin_required
def export_audit_logs():
    """Экспорт журнала аудита в Excel с фильтрами"""
    from services.export.excel import ExcelExporter
    action, resource = _audit_filters()
    entries = services().audit.entries(action=action or None, resource=resource or None)
    file_data = ExcelExporter.export_audit_logs(entries)
    log.info(f"Audit log export by #{g.admin.id}: {len(entries)} entries")
    return send_file(
        file_data,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'audit_logs_{datetime.date.today()}.xlsx'
    )
