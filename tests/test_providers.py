from unittest.mock import Mock

import pytest
import requests

from distillpress.services.ai_providers import GeminiProvider, PoeProvider
from distillpress.services.model_cache import ModelCache
from distillpress.services.transients import TransientStore
from distillpress.services.usage_log import UsageLog
from helpers import chat_payload, make_response


CATALOG = {
    "data": [
        {"id": "zeta-vision", "metadata": {"display_name": "zeta Vision"},
         "architecture": {"input_modalities": ["text", "image"]}},
        {"id": "Alpha-Text", "architecture": {"input_modalities": ["text"]}},
        {"id": "beta", "metadata": {"display_name": "Beta Chat"}},
    ]
}


def _poe(session, **kwargs):
    return PoeProvider(
        base_url="https://poe.test",
        cache=ModelCache(TransientStore()),
        usage_log=UsageLog(),
        session=session,
        **kwargs,
    )


@pytest.mark.usefixtures('app_ctx')
def test_chat_with_system_posts_openai_body_and_logs_usage():
    session = Mock()
    session.post.return_value = make_response(
        200, chat_payload("Hello", {"prompt_tokens": 11, "completion_tokens": 3, "total_tokens": 14})
    )
    session.get.return_value = make_response(200, {"data": [{"cost_points": 42}]})
    provider = _poe(session)

    result = provider.chat_with_system("key-1", "gpt-4o-mini", "sys", "user", 0.4, 2500)

    assert result.ok and result.value == "Hello"
    args, kwargs = session.post.call_args
    assert args[0] == "https://poe.test/v1/chat/completions"
    assert kwargs["json"] == {
        "model": "gpt-4o-mini",
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "user"}],
        "temperature": 0.4,
        "max_tokens": 2500,
    }
    assert kwargs["headers"]["Authorization"] == "Bearer key-1"
    assert kwargs["timeout"] == 60
    assert kwargs["verify"] is True

    _, get_kwargs = session.get.call_args
    assert get_kwargs["params"] == {"limit": 1}
    assert get_kwargs["timeout"] == 5

    entries = provider.usage_log.entries()
    assert len(entries) == 1
    assert entries[0]["action_type"] == "chat_with_system"
    assert entries[0]["model"] == "gpt-4o-mini"
    assert entries[0]["cost_points"] == 42
    assert entries[0]["total_tokens"] == 14


@pytest.mark.usefixtures('app_ctx')
def test_missing_key_is_rejected_before_any_io():
    session = Mock()
    provider = _poe(session)

    result = provider.chat_completion("", "gpt-4o-mini", "hi")
    models = provider.get_models("")

    assert not result.ok and result.code == "missing_api_key"
    assert not models.ok and models.code == "missing_api_key"
    session.post.assert_not_called()
    session.get.assert_not_called()


@pytest.mark.usefixtures('app_ctx')
def test_non_200_becomes_api_error_without_log_entry():
    session = Mock()
    session.post.return_value = make_response(500, None, text="upstream exploded")
    provider = _poe(session)

    result = provider.chat_completion("key", "gpt-4o-mini", "hi")

    assert not result.ok
    assert result.code == "api_error"
    assert result.error.status_code == 500
    assert result.message == "API returned status 500"
    assert "upstream exploded" not in result.message
    assert provider.usage_log.entries() == []


@pytest.mark.usefixtures('app_ctx')
def test_transport_failure_becomes_transport_error():
    session = Mock()
    session.post.side_effect = requests.ConnectionError("connection refused")
    provider = _poe(session)

    result = provider.chat_completion("key", "gpt-4o-mini", "hi")

    assert not result.ok and result.code == "http_request_failed"


@pytest.mark.usefixtures('app_ctx')
@pytest.mark.parametrize("payload", [
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"message": {"content": None}}]},
    ValueError("not json"),
])
def test_malformed_success_body_is_invalid_response(payload):
    session = Mock()
    session.post.return_value = make_response(200, payload)
    provider = _poe(session)

    result = provider.chat_completion("key", "gpt-4o-mini", "hi")

    assert not result.ok and result.code == "invalid_response"


@pytest.mark.usefixtures('app_ctx')
def test_cost_lookup_failure_is_swallowed():
    session = Mock()
    session.post.return_value = make_response(200, chat_payload("ok"))
    session.get.side_effect = requests.Timeout("slow")
    provider = _poe(session)

    result = provider.chat_completion("key", "gpt-4o-mini", "hi")

    assert result.ok and result.value == "ok"
    entry = provider.usage_log.entries()[0]
    assert entry["action_type"] == "chat_completion"
    assert entry["cost_points"] is None
    assert entry["prompt_tokens"] is None


@pytest.mark.usefixtures('app_ctx')
def test_get_models_sorts_filters_and_caches():
    session = Mock()
    session.get.return_value = make_response(200, CATALOG)
    provider = _poe(session)

    first = provider.get_models("key-a")
    second = provider.get_models("key-a")

    assert first.ok and second.ok
    assert [m.display_name for m in first.value] == ["Alpha-Text", "Beta Chat", "zeta Vision"]
    assert [m.id for m in second.value] == ["Alpha-Text", "beta", "zeta-vision"]
    assert session.get.call_count == 1
    args, kwargs = session.get.call_args
    assert args[0] == "https://poe.test/v1/models"
    assert kwargs["timeout"] == 30

    images = provider.get_models("key-a", image_only=True)
    assert [m.id for m in images.value] == ["zeta-vision"]
    assert images.value[0].supports_images is True
    assert session.get.call_count == 2


@pytest.mark.usefixtures('app_ctx')
def test_different_key_misses_cache_and_clear_removes_both_variants():
    session = Mock()
    session.get.return_value = make_response(200, CATALOG)
    provider = _poe(session)

    provider.get_models("key-a")
    provider.get_models("key-a", image_only=True)
    provider.get_models("key-b")
    assert session.get.call_count == 3

    provider.clear_models_cache("key-a")
    assert provider.cache.get("key-a") is None
    assert provider.cache.get("key-a", True) is None
    assert provider.cache.get("key-b") is not None


@pytest.mark.usefixtures('app_ctx')
def test_empty_catalog_is_not_cached():
    session = Mock()
    session.get.return_value = make_response(200, {"data": []})
    provider = _poe(session)

    assert provider.get_models("key").value == []
    assert provider.get_models("key").value == []
    assert session.get.call_count == 2


@pytest.mark.usefixtures('app_ctx')
def test_catalog_errors_map_to_kinds():
    session = Mock()
    provider = _poe(session)

    session.get.return_value = make_response(401, None)
    assert provider.get_models("key").code == "api_error"

    session.get.return_value = make_response(200, ValueError("bad json"))
    assert provider.get_models("key").code == "json_error"

    session.get.side_effect = requests.ConnectionError("down")
    assert provider.get_models("key").code == "http_request_failed"


@pytest.mark.usefixtures('app_ctx')
def test_gemini_uses_its_endpoint_and_logs_null_cost():
    session = Mock()
    session.post.return_value = make_response(200, chat_payload("Hallo", {"total_tokens": 9}))
    provider = GeminiProvider(
        base_url="https://gemini.test/v1beta/openai",
        cache=ModelCache(TransientStore()),
        usage_log=UsageLog(),
        session=session,
    )

    result = provider.chat_completion("g-key", "gemini-flash-latest", "hi")

    assert result.ok and result.value == "Hallo"
    assert session.post.call_args[0][0] == "https://gemini.test/v1beta/openai/chat/completions"
    session.get.assert_not_called()
    entry = provider.usage_log.entries()[0]
    assert entry["cost_points"] is None
    assert entry["total_tokens"] == 9


@pytest.mark.usefixtures('app_ctx')
def test_gemini_errors_name_the_provider_and_catalog_is_fixed():
    session = Mock()
    session.post.return_value = make_response(503, None, text="overloaded")
    provider = GeminiProvider(cache=ModelCache(TransientStore()), usage_log=UsageLog(), session=session)

    result = provider.chat_completion("g-key", "gemini-pro-latest", "hi")
    assert result.message == "Gemini API returned status 503"
    assert result.error.status_code == 503

    models = provider.get_models("g-key")
    assert [(m.id, m.display_name) for m in models.value] == [
        ("gemini-flash-latest", "Gemini Flash (fast, cheap)"),
        ("gemini-pro-latest", "Gemini Pro (most capable)"),
    ]
    assert provider.get_models("").code == "missing_api_key"
