import pytest

from distillpress.services.host_store import SUMMARY_META_KEY
from distillpress.services.settings_store import SettingsStore
from helpers import chat_payload, make_response


def _set_key(app, **values):
    values.setdefault('api_key_poe', 'poe-key')
    SettingsStore(config=app.config).save(values)


def test_unauthenticated_calls_get_json_401(client):
    resp = client.post('/api/distillpress/generate-summary', json={'content': 'x'})
    assert resp.status_code == 401
    assert resp.get_json()['success'] is False


def test_subscriber_cannot_generate(subscriber_client, http_session):
    resp = subscriber_client.post('/api/distillpress/generate-summary', json={'content': 'x'})

    assert resp.status_code == 403
    assert resp.get_json() == {
        'success': False,
        'data': {'message': 'Permission denied.', 'code': 'permission_denied'},
    }
    http_session.post.assert_not_called()


def test_editor_cannot_read_settings_or_models(editor_client):
    assert editor_client.get('/api/distillpress/settings').status_code == 403
    assert editor_client.get('/api/distillpress/models').status_code == 403
    assert editor_client.get('/api/distillpress/api-log').status_code == 403


def test_generate_summary_success(app, editor_client, http_session, post):
    _set_key(app)
    http_session.post.return_value = make_response(200, chat_payload('{"summary": "• A", "teaser": "T"}'))

    resp = editor_client.post(
        '/api/distillpress/generate-summary',
        json={'content': post.content, 'post_id': post.id, 'num_points': 2},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {'success': True, 'data': {'summary': '• A', 'teaser': 'T'}}
    assert post.get_meta(SUMMARY_META_KEY) == '• A'


def test_generate_summary_accepts_form_posts(app, editor_client, http_session):
    _set_key(app)
    http_session.post.return_value = make_response(200, chat_payload('{"summary": "• A"}'))

    resp = editor_client.post('/api/distillpress/generate-summary', data={'content': 'Body', 'num_points': '4'})

    assert resp.status_code == 200
    assert resp.get_json()['data']['summary'] == '• A'


def test_validation_error_maps_to_400(app, editor_client):
    _set_key(app, enable_summary=False, enable_teaser=False)

    resp = editor_client.post('/api/distillpress/generate-summary', json={'content': 'Body'})

    assert resp.status_code == 400
    assert resp.get_json()['data']['code'] == 'features_disabled'


def test_upstream_error_maps_to_502(app, editor_client, http_session):
    _set_key(app)
    http_session.post.return_value = make_response(429, None, text='slow down')

    resp = editor_client.post('/api/distillpress/generate-summary', json={'content': 'Body'})

    assert resp.status_code == 502
    data = resp.get_json()['data']
    assert data['code'] == 'api_error'
    assert data['status_code'] == 429
    assert 'slow down' not in data['message']


def test_auto_categorize_route(app, editor_client, http_session, categories, post):
    _set_key(app)
    http_session.post.return_value = make_response(200, chat_payload('["Politics"]'))

    resp = editor_client.post(
        '/api/distillpress/auto-categorize',
        json={'content': 'Election night', 'post_id': post.id, 'max_categories': 2},
    )

    assert resp.status_code == 200
    assert resp.get_json()['data'] == {
        'category_ids': [categories['Politics'].id],
        'category_names': ['Politics'],
    }


def test_models_route_for_admin(app, login_client, http_session):
    _set_key(app)
    http_session.get.return_value = make_response(200, {
        'data': [{'id': 'gpt-4o', 'metadata': {'display_name': 'GPT-4o'},
                  'architecture': {'input_modalities': ['text', 'image']}}]
    })

    resp = login_client.get('/api/distillpress/models?image_only=1')

    assert resp.status_code == 200
    assert resp.get_json()['data']['models'] == [{'id': 'gpt-4o', 'name': 'GPT-4o', 'supports_images': True}]


def test_models_route_without_key(login_client, http_session):
    resp = login_client.get('/api/distillpress/models')

    assert resp.status_code == 400
    assert resp.get_json()['data']['code'] == 'missing_api_key'
    http_session.get.assert_not_called()


def test_settings_roundtrip_never_returns_keys(login_client):
    resp = login_client.post('/api/distillpress/settings', json={
        'api_key_poe': 'poe-secret',
        'default_points': 40,
        'custom_instructions': 'Be brief.',
    })

    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'poe-secret' not in body
    settings = resp.get_json()['data']['settings']
    assert settings['default_points'] == 20
    assert settings['api_keys']['poe']['configured'] is True

    fetched = login_client.get('/api/distillpress/settings').get_json()['data']['settings']
    assert fetched['custom_instructions'] == 'Be brief.'


def test_api_log_route_lists_newest_first(app, login_client, http_session):
    _set_key(app)
    for content in ('first', 'second'):
        http_session.post.return_value = make_response(200, chat_payload(content, {'total_tokens': 5}))
        login_client.post('/api/distillpress/generate-summary', json={'content': content})

    entries = login_client.get('/api/distillpress/api-log').get_json()['data']['entries']

    assert len(entries) == 2
    assert all(entry['action_type'] == 'chat_with_system' for entry in entries)
    assert entries[0]['total_tokens'] == 5


def test_post_state_route(editor_client, post):
    resp = editor_client.get(f'/api/distillpress/posts/{post.id}')
    assert resp.status_code == 200
    assert resp.get_json()['data']['post_id'] == post.id

    assert editor_client.get('/api/distillpress/posts/9999').status_code == 404


def test_csrf_token_is_required_when_enabled(app, editor_client):
    app.config['WTF_CSRF_ENABLED'] = True

    resp = editor_client.post('/api/distillpress/generate-summary', json={'content': 'Body'})
    assert resp.status_code == 400
    assert resp.get_json()['data']['code'] == 'invalid_nonce'

    token = editor_client.get('/api/distillpress/csrf-token').get_json()['data']['csrf_token']
    assert token


@pytest.mark.usefixtures('admin_user')
def test_login_and_logout(client):
    bad = client.post('/auth/login', json={'email': 'admin@example.com', 'password': 'nope'})
    assert bad.status_code == 401

    ok = client.post('/auth/login', json={'email': 'ADMIN@example.com', 'password': 'password'})
    assert ok.status_code == 200
    assert ok.get_json()['data']['user']['role'] == 'administrator'
    assert client.get('/api/distillpress/settings').status_code == 200

    assert client.post('/auth/logout').status_code == 200
    assert client.get('/api/distillpress/settings').status_code == 401
