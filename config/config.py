import os
from typing import Iterable, Optional
from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Return an environment variable as bool."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {'true', '1', 'on', 'yes'}


def _env_int(name: str, default: int) -> int:
    """Return an environment variable as int with safe fallback."""
    raw = os.environ.get(name)
    return int(raw) if raw not in (None, '') else default


def _env_float(name: str, default: float) -> float:
    """Return an environment variable as float with safe fallback."""
    raw = os.environ.get(name)
    return float(raw) if raw not in (None, '') else default


def _env_list(name: str, default: Iterable[str], sep: str = ',') -> list[str]:
    """Return a normalized list split by separator."""
    raw = os.environ.get(name)
    if raw is None:
        return [s.strip().lower() for s in default if s.strip()]
    return [item.strip().lower() for item in raw.split(sep) if item.strip()]


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Return a trimmed string or default when unset."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


class Config:
    """Configuration for the DistillPress admin application."""

    # --- Application basics ---
    SECRET_KEY = _env_str('SECRET_KEY', 'dev-secret-key-change-in-production')

    # --- Database ---
    SQLALCHEMY_DATABASE_URI = _env_str('DATABASE_URL') or f"sqlite:///{os.path.join(basedir, '..', 'distillpress.db')}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- AI providers ---
    POE_API_BASE_URL = _env_str('POE_API_BASE_URL', 'https://api.poe.com')
    GEMINI_API_BASE_URL = _env_str('GEMINI_API_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta/openai')
    # Deployment-level keys win over the keys stored through the settings screen
    DISTILLPRESS_POE_API_KEY = _env_str('DISTILLPRESS_POE_API_KEY')
    DISTILLPRESS_GEMINI_API_KEY = _env_str('DISTILLPRESS_GEMINI_API_KEY')

    # --- Outbound HTTP ---
    CHAT_TIMEOUT_SECS = _env_float('CHAT_TIMEOUT_SECS', 60.0)
    CATALOG_TIMEOUT_SECS = _env_float('CATALOG_TIMEOUT_SECS', 30.0)
    USAGE_LOOKUP_TIMEOUT_SECS = _env_float('USAGE_LOOKUP_TIMEOUT_SECS', 5.0)

    # --- Cache / request log ---
    MODEL_CACHE_TTL_SECS = _env_int('MODEL_CACHE_TTL_SECS', 60 * 60)
    API_LOG_LIMIT = _env_int('API_LOG_LIMIT', 10)

    # --- Content ---
    SUPPORTED_POST_TYPES = set(_env_list('SUPPORTED_POST_TYPES', {'post', 'page'}))

    # --- Session / Cookie Security ---
    SESSION_COOKIE_SAMESITE = _env_str('SESSION_COOKIE_SAMESITE', 'Lax')
    REMEMBER_COOKIE_SAMESITE = _env_str('REMEMBER_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = _env_bool('SESSION_COOKIE_SECURE', False)
    REMEMBER_COOKIE_SECURE = _env_bool('REMEMBER_COOKIE_SECURE', False)
    PERMANENT_SESSION_LIFETIME = _env_int('PERMANENT_SESSION_LIFETIME', 60 * 60 * 8)

    # --- CSRF ---
    WTF_CSRF_TIME_LIMIT = _env_int('WTF_CSRF_TIME_LIMIT', 60 * 60 * 24)

    # --- Security Headers ---
    REFERRER_POLICY = _env_str('REFERRER_POLICY', 'strict-origin-when-cross-origin')
    PERMISSIONS_POLICY = _env_str('PERMISSIONS_POLICY', "geolocation=(), microphone=(), camera=()")
    ENABLE_HSTS = _env_bool('ENABLE_HSTS', False)
    HSTS_MAX_AGE = _env_int('HSTS_MAX_AGE', 15_552_000)
    HSTS_INCLUDE_SUBDOMAINS = _env_bool('HSTS_INCLUDE_SUBDOMAINS', True)
    HSTS_PRELOAD = _env_bool('HSTS_PRELOAD', False)

    # --- Rate Limiting ---
    RATELIMIT_STORAGE_URI = _env_str('RATELIMIT_STORAGE_URI', 'memory://')
    DISTILL_RATE_LIMIT = _env_str('DISTILL_RATE_LIMIT', '30/minute')

    # --- Localization ---
    BABEL_DEFAULT_LOCALE = _env_str('BABEL_DEFAULT_LOCALE', 'en')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = _env_str('TEST_DATABASE_URL', 'sqlite:///:memory:')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False},
        'poolclass': StaticPool,
    }
    WTF_CSRF_ENABLED = False
    SERVER_NAME = 'localhost'
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_ENABLED = False

    # Never talk to real providers from tests
    POE_API_BASE_URL = 'https://poe.test'
    GEMINI_API_BASE_URL = 'https://gemini.test/v1beta/openai'
    DISTILLPRESS_POE_API_KEY = None
    DISTILLPRESS_GEMINI_API_KEY = None
