from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from flask import current_app

from .ai_providers import GeminiProvider, PoeProvider
from .ai_providers.base import BaseProvider
from .host_store import HostStore
from .model_cache import ModelCache
from .settings_store import PROVIDER_GEMINI, PROVIDER_POE, Settings, SettingsStore
from .transients import TransientStore
from .usage_log import UsageLog


@dataclass
class DistillContext:
    """Everything a handler needs, assembled once per request."""

    settings: Settings
    settings_store: SettingsStore
    cache: ModelCache
    usage_log: UsageLog
    host: HostStore
    providers: Dict[str, BaseProvider]
    session: requests.Session
    config: Mapping[str, Any]

    @property
    def provider(self) -> BaseProvider:
        return self.providers.get(self.settings.provider) or self.providers[PROVIDER_POE]

    @classmethod
    def build(
        cls,
        config: Mapping[str, Any],
        *,
        session: Optional[requests.Session] = None,
        settings: Optional[Settings] = None,
    ) -> "DistillContext":
        session = session or requests.Session()
        cache = ModelCache(TransientStore(), ttl_seconds=int(config.get('MODEL_CACHE_TTL_SECS', ModelCache.DEFAULT_TTL)))
        usage_log = UsageLog(limit=int(config.get('API_LOG_LIMIT', UsageLog.DEFAULT_LIMIT)))
        settings_store = SettingsStore(config=config, cache=cache)

        common = dict(
            cache=cache,
            usage_log=usage_log,
            session=session,
            chat_timeout=config.get('CHAT_TIMEOUT_SECS', 60),
        )
        providers: Dict[str, BaseProvider] = {
            PROVIDER_POE: PoeProvider(
                base_url=config.get('POE_API_BASE_URL'),
                catalog_timeout=config.get('CATALOG_TIMEOUT_SECS', 30),
                usage_timeout=config.get('USAGE_LOOKUP_TIMEOUT_SECS', 5),
                **common,
            ),
            PROVIDER_GEMINI: GeminiProvider(base_url=config.get('GEMINI_API_BASE_URL'), **common),
        }
        return cls(
            settings=settings if settings is not None else settings_store.load(),
            settings_store=settings_store,
            cache=cache,
            usage_log=usage_log,
            host=HostStore(post_types=config.get('SUPPORTED_POST_TYPES')),
            providers=providers,
            session=session,
            config=config,
        )

    @classmethod
    def from_app(cls, *, session: Optional[requests.Session] = None) -> "DistillContext":
        """Context for the current application; a session stored under
        ``app.extensions['distillpress_http']`` is reused when present."""
        app = current_app._get_current_object()
        session = session or app.extensions.get('distillpress_http')
        return cls.build(app.config, session=session)
