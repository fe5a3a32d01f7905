from datetime import datetime

from flask import Blueprint, current_app, jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func, or_

from distillpress import db, limiter
from distillpress.models.user import User
from distillpress.utils.validators import sanitize_text, to_bool

bp = Blueprint('auth', __name__)


def _user_payload(user):
    return {'id': user.id, 'username': user.username, 'email': user.email, 'role': user.role}


@bp.route('/login', methods=['POST'])
@limiter.limit("10/minute; 100/hour", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return jsonify({'success': True, 'data': {'user': _user_payload(current_user)}})

    payload = request.get_json(silent=True) or request.form
    login_name = sanitize_text(payload.get('email') or payload.get('username'), max_len=120).lower()
    password = payload.get('password') or ''
    remember = to_bool(payload.get('remember'), False)

    # Case-insensitive lookup by email or username
    user = None
    if login_name:
        user = User.query.filter(
            or_(func.lower(User.email) == login_name, func.lower(User.username) == login_name)
        ).first()

    if user is None or not user.check_password(password):
        current_app.logger.warning('Failed login attempt for login=%s', login_name)
        return jsonify({'success': False, 'data': {'message': 'Invalid login or password', 'code': 'invalid_credentials'}}), 401

    user.last_login = datetime.utcnow()
    db.session.commit()
    session.permanent = True
    login_user(user, remember=remember)
    return jsonify({'success': True, 'data': {'user': _user_payload(user)}})


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True, 'data': {}})
