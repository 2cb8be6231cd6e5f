from flask import Blueprint, render_template, request
from web.extensions import services

public_bp = Blueprint('public', __name__)


@public_bp.route('/')
def index():
    return render_template('public/index.html')


@public_bp.route('/about')
def about():
    return render_template('public/about.html')


def validate_contact(name, email, message) -> dict:
    """Field errors for the contact form; empty dict means the submission is valid."""
    errors = {}
    if not name or len(name) < 2:
        errors['name'] = 'Name must be at least 2 characters long'
    if not email or '@' not in email:
        errors['email'] = 'Please enter a valid email address'
    if not message or len(message) < 10:
        errors['message'] = 'Message must be at least 10 characters long'
    return errors


@public_bp.route('/contact', methods=['GET', 'POST'])
def contact():
    if request.method == 'POST':
        form = {
            'name': request.form.get('name', '').strip(),
            'email': request.form.get('email', '').strip(),
            'message': request.form.get('message', '').strip(),
        }
        errors = validate_contact(**form)
        if errors:
            return render_template('public/contact.html', errors=errors, form=form), 400
        return render_template('public/contact.html', success=True, form={})
    return render_template('public/contact.html', errors={}, form={})


@public_bp.route('/data-example')
def data_example():
    """Живые данные из базы: активные пользователи и опубликованные посты."""
    svc = services()
    return render_template('public/data_example.html',
                           users=svc.users.active(10), posts=svc.posts.published(10))
