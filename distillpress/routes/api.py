from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from flask_wtf.csrf import generate_csrf

from distillpress import limiter
from distillpress.services.context import DistillContext
from distillpress.services.distill_service import (
    CategorizationRequest,
    GenerationRequest,
    auto_categorize,
    generate_summary,
    get_models,
    get_post_state,
)
from distillpress.utils.auth_decorators import require_capability
from distillpress.utils.validators import to_bool, to_optional_id

bp = Blueprint('api', __name__)


def _distill_rate_limit():
    return current_app.config.get('DISTILL_RATE_LIMIT', '30/minute')


@bp.before_request
def _api_auth_guard():
    """Ensure API returns JSON 401 instead of a redirect when not authenticated."""
    try:
        if not getattr(current_user, 'is_authenticated', False):
            return jsonify({'success': False, 'data': {'message': 'Unauthorized', 'code': 'unauthorized'}}), 401
    except Exception:
        return jsonify({'success': False, 'data': {'message': 'Authentication error', 'code': 'unauthorized'}}), 401


def _payload():
    return request.get_json(silent=True) or request.form


def _success(data):
    return jsonify({'success': True, 'data': data})


def _failure(result):
    error = result.error
    return jsonify({'success': False, 'data': error.to_dict()}), error.http_status


@bp.route('/csrf-token')
@login_required
def csrf_token():
    return _success({'csrf_token': generate_csrf()})


@bp.route('/generate-summary', methods=['POST'])
@login_required
@require_capability('edit_posts')
@limiter.limit(_distill_rate_limit)
def generate_summary_view():
    payload = _payload()
    ctx = DistillContext.from_app()
    result = generate_summary(
        ctx,
        GenerationRequest(
            content=payload.get('content') or '',
            post_id=to_optional_id(payload.get('post_id')),
            num_points=payload.get('num_points', 3),
            reduction_percent=payload.get('reduction_percent', 0),
        ),
    )
    if not result.ok:
        return _failure(result)
    return _success(result.value.to_dict())


@bp.route('/auto-categorize', methods=['POST'])
@login_required
@require_capability('edit_posts')
@limiter.limit(_distill_rate_limit)
def auto_categorize_view():
    payload = _payload()
    ctx = DistillContext.from_app()
    result = auto_categorize(
        ctx,
        CategorizationRequest(
            content=payload.get('content') or '',
            max_categories=payload.get('max_categories', 3),
            post_id=to_optional_id(payload.get('post_id')),
        ),
    )
    if not result.ok:
        return _failure(result)
    return _success(result.value.to_dict())


@bp.route('/models')
@login_required
@require_capability('manage_options')
def models_view():
    ctx = DistillContext.from_app()
    result = get_models(ctx, image_only=to_bool(request.args.get('image_only'), False))
    if not result.ok:
        return _failure(result)
    return _success({'models': [model.to_dict() for model in result.value]})


@bp.route('/posts/<int:post_id>')
@login_required
@require_capability('edit_posts')
def post_state_view(post_id):
    ctx = DistillContext.from_app()
    state = get_post_state(ctx, post_id)
    if state['post_id'] is None:
        return jsonify({'success': False, 'data': {'message': 'Not Found', 'code': 'not_found'}}), 404
    return _success(state)


@bp.route('/settings', methods=['GET'])
@login_required
@require_capability('manage_options')
def settings_view():
    ctx = DistillContext.from_app()
    return _success({'settings': ctx.settings.to_public_dict()})


@bp.route('/settings', methods=['POST'])
@login_required
@require_capability('manage_options')
def settings_update():
    payload = _payload()
    ctx = DistillContext.from_app()
    settings = ctx.settings_store.save(payload)
    current_app.logger.info(
        'DistillPress settings saved',
        extra={'event': 'settings_saved', 'user_id': current_user.id, 'provider': settings.provider},
    )
    return _success({'settings': settings.to_public_dict()})


@bp.route('/api-log')
@login_required
@require_capability('manage_options')
def api_log_view():
    ctx = DistillContext.from_app()
    return _success({'entries': ctx.usage_log.entries()})
