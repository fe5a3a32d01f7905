from functools import wraps

from flask import jsonify
from flask_login import current_user

from distillpress.services.errors import PermissionDeniedError


def _denied():
    error = PermissionDeniedError()
    return jsonify({'success': False, 'data': error.to_dict()}), error.http_status


def require_capability(capability):
    """Reject the request with a JSON 403 unless the user holds ``capability``."""
    def decorator(view):
        @wraps(view)
        def _wrapped(*args, **kwargs):
            if not getattr(current_user, 'is_authenticated', False):
                return jsonify({'success': False, 'data': {'message': 'Unauthorized', 'code': 'unauthorized'}}), 401
            if not current_user.can(capability):
                return _denied()
            return view(*args, **kwargs)
        return _wrapped
    return decorator
