import requests
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import current_user as _rl_current_user
from flask_babel import Babel

db = SQLAlchemy()
migrate = Migrate()
login = LoginManager()
csrf = CSRFProtect()
babel = Babel()

def _rate_limit_key():
    """Return a stable limiter key per authenticated user; fallback to client IP."""
    try:
        if getattr(_rl_current_user, 'is_authenticated', False):
            return f"user:{getattr(_rl_current_user, 'id', 'anon')}"
    except Exception:
        pass
    return get_remote_address()

limiter = Limiter(key_func=_rate_limit_key, default_limits=[], headers_enabled=True)

def create_app(config_class='config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    def get_locale():
        from flask import request
        try:
            return request.accept_languages.best_match(['en', 'fr']) or app.config.get('BABEL_DEFAULT_LOCALE', 'en')
        except Exception:
            return app.config.get('BABEL_DEFAULT_LOCALE', 'en')

    babel.init_app(app, locale_selector=get_locale)

    # One pooled HTTP session for all provider calls
    app.extensions['distillpress_http'] = requests.Session()

    # Models register their tables and the user loader on import
    from distillpress.models import user, content, options, api_log  # noqa: F401

    # Register blueprints
    from distillpress.routes.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    from distillpress.routes.api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix='/api/distillpress')

    from distillpress.cli import register_cli
    register_cli(app)

    # Security headers
    @app.after_request
    def _set_security_headers(resp):
        try:
            resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
            resp.headers.setdefault('X-Frame-Options', 'DENY')
            resp.headers.setdefault('Referrer-Policy', app.config.get('REFERRER_POLICY', 'strict-origin-when-cross-origin'))
            resp.headers.setdefault('Permissions-Policy', app.config.get('PERMISSIONS_POLICY', "geolocation=(), microphone=(), camera=()"))
            # HSTS (only if enabled)
            if app.config.get('ENABLE_HSTS', False):
                max_age = int(app.config.get('HSTS_MAX_AGE', 15552000))  # 180 days
                include_sub = '; includeSubDomains' if app.config.get('HSTS_INCLUDE_SUBDOMAINS', True) else ''
                preload = '; preload' if app.config.get('HSTS_PRELOAD', False) else ''
                resp.headers.setdefault('Strict-Transport-Security', f'max-age={max_age}{include_sub}{preload}')
        except Exception:
            app.logger.exception('Failed to set security headers')
        return resp

    # CSRF error handling: the admin surface is JSON only
    from flask_wtf.csrf import CSRFError
    from flask import jsonify
    from werkzeug.exceptions import RequestEntityTooLarge

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        return jsonify({'success': False, 'data': {'message': 'CSRF validation failed', 'code': 'invalid_nonce'}}), 400

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify({'success': False, 'data': {'message': 'Not Found', 'code': 'not_found'}}), 404

    @app.errorhandler(403)
    def handle_403(e):
        return jsonify({'success': False, 'data': {'message': 'Forbidden', 'code': 'forbidden'}}), 403

    @app.errorhandler(429)
    def handle_429(e):
        return jsonify({'success': False, 'data': {'message': 'Too many requests', 'code': 'rate_limited'}}), 429

    @app.errorhandler(500)
    def handle_500(e):
        return jsonify({'success': False, 'data': {'message': 'Server Error', 'code': 'server_error'}}), 500

    @app.errorhandler(RequestEntityTooLarge)
    def handle_413(e):
        return jsonify({'success': False, 'data': {'message': 'Request too large', 'code': 'too_large'}}), 413

    # Health endpoint for container/lb checks (no auth, no rate limit)
    @app.get('/healthz')
    @limiter.exempt
    def healthz():
        return 'ok', 200

    return app
