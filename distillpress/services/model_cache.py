from __future__ import annotations

import hashlib
from typing import List, Optional, Sequence

from .ai_providers.types import ModelCatalogEntry
from .transients import TransientStore


class ModelCache:
    """Caches a provider's model catalog per (API key, image-only flag)."""

    PREFIX = 'distillpress_models_'
    DEFAULT_TTL = 60 * 60

    def __init__(self, store: TransientStore, *, ttl_seconds: int = DEFAULT_TTL) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds

    @classmethod
    def cache_key(cls, api_key: str, image_only: bool = False) -> str:
        digest = hashlib.md5((api_key or '').encode('utf-8')).hexdigest()
        return f"{cls.PREFIX}{digest}{'_img' if image_only else ''}"

    def get(self, api_key: str, image_only: bool = False) -> Optional[List[ModelCatalogEntry]]:
        cached = self.store.get(self.cache_key(api_key, image_only))
        if not isinstance(cached, list):
            return None
        return [ModelCatalogEntry.from_dict(item) for item in cached if isinstance(item, dict)]

    def set(self, api_key: str, image_only: bool, models: Sequence[ModelCatalogEntry]) -> bool:
        # an empty catalog is never cached so a transient empty answer is retried
        if not models:
            return False
        self.store.set(
            self.cache_key(api_key, image_only),
            [model.to_dict() for model in models],
            self.ttl_seconds,
        )
        return True

    def clear(self, api_key: str) -> None:
        self.store.delete(self.cache_key(api_key, False))
        self.store.delete(self.cache_key(api_key, True))

    def clear_all(self) -> int:
        return self.store.delete_prefix(self.PREFIX)
