"""Plugin settings persisted as host options.

Settings are read once per request into an immutable :class:`Settings`
value. API keys are encrypted at rest and never leave this module in
serialised form; a deployment may pin a key through configuration, in
which case the stored option is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from flask import current_app

from distillpress import db
from distillpress.models.options import Option
from distillpress.security.crypto import EncryptionError, decrypt_secret, encrypt_secret
from distillpress.utils.validators import sanitize_text, sanitize_textarea, to_bool, to_int, to_optional_id

if TYPE_CHECKING:
    from .model_cache import ModelCache

PROVIDER_POE = 'poe'
PROVIDER_GEMINI = 'gemini'
PROVIDERS = (PROVIDER_POE, PROVIDER_GEMINI)

OPTION_PREFIX = 'distillpress_'

OPTION_NAMES = {
    'provider': 'distillpress_provider',
    'api_key_poe': 'distillpress_api_key',
    'api_key_gemini': 'distillpress_api_key_gemini',
    'model_poe': 'distillpress_model',
    'model_gemini': 'distillpress_model_gemini',
    'default_points': 'distillpress_default_num_points',
    'default_reduction_percent': 'distillpress_default_reduction_percent',
    'default_max_categories': 'distillpress_default_max_categories',
    'default_category_id': 'distillpress_default_category',
    'enable_summary': 'distillpress_enable_summary',
    'enable_teaser': 'distillpress_enable_teaser',
    'custom_instructions': 'distillpress_custom_prompt',
}

_SECRET_FIELDS = ('api_key_poe', 'api_key_gemini')
_CONFIG_KEYS = {
    'api_key_poe': 'DISTILLPRESS_POE_API_KEY',
    'api_key_gemini': 'DISTILLPRESS_GEMINI_API_KEY',
}


def _logger() -> logging.Logger:
    try:
        return current_app.logger
    except Exception:  # pragma: no cover - fallback outside app context
        return logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    provider: str = PROVIDER_POE
    api_key_poe: str = field(default='', repr=False)
    api_key_gemini: str = field(default='', repr=False)
    model_poe: str = 'gpt-4o-mini'
    model_gemini: str = 'gemini-flash-latest'
    default_points: int = 3
    default_reduction_percent: int = 0
    default_max_categories: int = 3
    default_category_id: Optional[int] = None
    enable_summary: bool = True
    enable_teaser: bool = True
    custom_instructions: str = ''
    poe_key_from_config: bool = False
    gemini_key_from_config: bool = False

    @property
    def api_key(self) -> str:
        return self.api_key_gemini if self.provider == PROVIDER_GEMINI else self.api_key_poe

    @property
    def model(self) -> str:
        return self.model_gemini if self.provider == PROVIDER_GEMINI else self.model_poe

    def to_public_dict(self) -> Dict[str, Any]:
        """Settings as exposed to the admin screen; keys are reported, never returned."""
        return {
            'provider': self.provider,
            'model_poe': self.model_poe,
            'model_gemini': self.model_gemini,
            'default_points': self.default_points,
            'default_reduction_percent': self.default_reduction_percent,
            'default_max_categories': self.default_max_categories,
            'default_category_id': self.default_category_id,
            'enable_summary': self.enable_summary,
            'enable_teaser': self.enable_teaser,
            'custom_instructions': self.custom_instructions,
            'api_keys': {
                PROVIDER_POE: {'configured': bool(self.api_key_poe), 'from_config': self.poe_key_from_config},
                PROVIDER_GEMINI: {'configured': bool(self.api_key_gemini), 'from_config': self.gemini_key_from_config},
            },
        }


DEFAULTS = Settings()


def sanitize_settings(values: Mapping[str, Any], base: Settings = DEFAULTS) -> Settings:
    """Coerce raw admin input onto ``base``; unknown or absent fields keep their value."""
    updates: Dict[str, Any] = {}
    if 'provider' in values:
        provider = sanitize_text(values.get('provider'), max_len=20).lower()
        updates['provider'] = provider if provider in PROVIDERS else base.provider
    for name in ('model_poe', 'model_gemini'):
        if name in values:
            updates[name] = sanitize_text(values.get(name), max_len=100) or getattr(DEFAULTS, name)
    for name in _SECRET_FIELDS:
        if name in values:
            updates[name] = sanitize_text(values.get(name), max_len=500)
    if 'default_points' in values:
        updates['default_points'] = to_int(values.get('default_points'), DEFAULTS.default_points, minimum=1, maximum=20)
    if 'default_reduction_percent' in values:
        updates['default_reduction_percent'] = to_int(values.get('default_reduction_percent'), 0, minimum=0, maximum=100)
    if 'default_max_categories' in values:
        updates['default_max_categories'] = to_int(
            values.get('default_max_categories'), DEFAULTS.default_max_categories, minimum=1, maximum=20
        )
    if 'default_category_id' in values:
        updates['default_category_id'] = to_optional_id(values.get('default_category_id'))
    for name in ('enable_summary', 'enable_teaser'):
        if name in values:
            updates[name] = to_bool(values.get(name), getattr(base, name))
    if 'custom_instructions' in values:
        updates['custom_instructions'] = sanitize_textarea(values.get('custom_instructions'))
    return replace(base, **updates)


class SettingsStore:
    def __init__(self, *, config: Optional[Mapping[str, Any]] = None, cache: Optional["ModelCache"] = None) -> None:
        self._config = config if config is not None else {}
        self.cache = cache

    def _config_key(self, name: str) -> str:
        return (self._config.get(_CONFIG_KEYS[name]) or '').strip()

    def _raw_options(self) -> Dict[str, Any]:
        rows = Option.query.filter(Option.name.in_(OPTION_NAMES.values())).all()
        return {row.name: row.value for row in rows}

    def _stored_secret(self, raw: Mapping[str, Any], name: str) -> str:
        token = raw.get(OPTION_NAMES[name])
        try:
            return decrypt_secret(token if isinstance(token, str) else None)
        except EncryptionError as exc:
            _logger().warning(
                "Stored API key is unreadable; treating it as not configured",
                extra={"event": "settings_key_unreadable", "option": OPTION_NAMES[name], "error": str(exc)},
            )
            return ''

    def load(self) -> Settings:
        raw = self._raw_options()
        values = {
            field_name: raw[option]
            for field_name, option in OPTION_NAMES.items()
            if option in raw and field_name not in _SECRET_FIELDS
        }
        settings = sanitize_settings(values)

        secrets: Dict[str, Any] = {}
        for name in _SECRET_FIELDS:
            override = self._config_key(name)
            secrets[name] = override or self._stored_secret(raw, name)
        return replace(
            settings,
            poe_key_from_config=bool(self._config_key('api_key_poe')),
            gemini_key_from_config=bool(self._config_key('api_key_gemini')),
            **secrets,
        )

    def save(self, values: Mapping[str, Any]) -> Settings:
        current = self.load()
        raw = self._raw_options()
        updated = sanitize_settings(values, base=current)

        for field_name, option in OPTION_NAMES.items():
            if field_name in _SECRET_FIELDS:
                if field_name not in values:
                    continue
                previous = self._stored_secret(raw, field_name)
                new_key = getattr(updated, field_name)
                if new_key == previous:
                    continue
                if previous and self.cache is not None:
                    self.cache.clear(previous)
                self._put(option, encrypt_secret(new_key))
                _logger().info(
                    "API key updated",
                    extra={"event": "settings_key_changed", "option": option, "cleared": not new_key},
                )
            else:
                self._put(option, getattr(updated, field_name))
        db.session.commit()
        return self.load()

    def install_defaults(self) -> int:
        """Create every missing option with its default; existing values are untouched."""
        existing = set(self._raw_options())
        created = 0
        for field_name, option in OPTION_NAMES.items():
            if option in existing:
                continue
            value = '' if field_name in _SECRET_FIELDS else getattr(DEFAULTS, field_name)
            db.session.add(Option(name=option, value=value))
            created += 1
        db.session.commit()
        return created

    def uninstall(self) -> int:
        deleted = Option.query.filter(Option.name.startswith(OPTION_PREFIX, autoescape=True)).delete(synchronize_session=False)
        db.session.commit()
        return int(deleted or 0)

    def _put(self, name: str, value: Any) -> None:
        row = Option.query.filter_by(name=name).first()
        if row is None:
            db.session.add(Option(name=name, value=value))
        else:
            row.value = value
