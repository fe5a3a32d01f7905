from __future__ import annotations

from typing import Any, List, Optional

import requests

from ..errors import JsonError, TransportError
from ..result import Err, Ok, Result
from .base import BaseProvider
from .types import ModelCatalogEntry, _as_int


class PoeProvider(BaseProvider):
    """POE (api.poe.com) chat completions, model catalog and points lookup."""

    name = "poe"
    BASE_URL = "https://api.poe.com"
    ENDPOINT = "/v1/chat/completions"
    MODELS_ENDPOINT = "/v1/models"
    POINTS_ENDPOINT = "/usage/points_history"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        catalog_timeout: float = 30,
        usage_timeout: float = 5,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url=base_url or self.BASE_URL, **kwargs)
        self.catalog_timeout = catalog_timeout
        self.usage_timeout = usage_timeout

    def get_models(self, api_key: str, image_only: bool = False) -> Result[List[ModelCatalogEntry]]:
        if not api_key:
            return Err(self.missing_api_key())

        cached = self.cache.get(api_key, image_only)
        if cached is not None:
            self.logger.debug(
                "Model catalog served from cache",
                extra={"event": "models_cache_hit", "provider": self.name, "image_only": image_only},
            )
            return Ok(cached)

        try:
            response = self._session.get(
                f"{self.base_url}{self.MODELS_ENDPOINT}",
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=self.catalog_timeout,
                verify=True,
            )
        except requests.RequestException as exc:
            self.logger.error(
                "POE model catalog request failed",
                extra={"event": "models_transport_error", "provider": self.name, "error": str(exc)},
            )
            return Err(TransportError(str(exc) or None))

        if response.status_code != 200:
            self.logger.error(
                "POE model catalog returned an error status",
                extra={"event": "models_api_error", "provider": self.name, "status_code": response.status_code},
            )
            return Err(self.api_error(response.status_code))

        try:
            payload = response.json()
        except ValueError:
            return Err(JsonError())

        models = self._parse_catalog(payload, image_only)
        self.cache.set(api_key, image_only, models)
        return Ok(models)

    @staticmethod
    def _parse_catalog(payload: Any, image_only: bool) -> List[ModelCatalogEntry]:
        data = payload.get("data") if isinstance(payload, dict) else None
        models: List[ModelCatalogEntry] = []
        for item in data or []:
            if not isinstance(item, dict) or not item.get("id"):
                continue
            architecture = item.get("architecture") or {}
            modalities = architecture.get("input_modalities") if isinstance(architecture, dict) else None
            supports_images = isinstance(modalities, list) and "image" in modalities
            if image_only and not supports_images:
                continue
            metadata = item.get("metadata") or {}
            display_name = metadata.get("display_name") if isinstance(metadata, dict) else None
            models.append(
                ModelCatalogEntry(
                    id=str(item["id"]),
                    display_name=str(display_name or item["id"]),
                    supports_images=supports_images,
                )
            )
        models.sort(key=lambda model: model.display_name.lower())
        return models

    def _cost_points(self, api_key: str) -> Optional[int]:
        # the most recent history entry is assumed to be the request just made
        try:
            response = self._session.get(
                f"{self.base_url}{self.POINTS_ENDPOINT}",
                params={"limit": 1},
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=self.usage_timeout,
                verify=True,
            )
            if response.status_code != 200:
                self.logger.warning(
                    "POE points lookup returned an error status",
                    extra={"event": "points_lookup_failed", "status_code": response.status_code},
                )
                return None
            payload = response.json()
            entries = payload.get("data") if isinstance(payload, dict) else None
            if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
                return None
            return _as_int(entries[0].get("cost_points"))
        except (requests.RequestException, ValueError) as exc:
            self.logger.warning(
                "POE points lookup failed",
                extra={"event": "points_lookup_failed", "error": str(exc)},
            )
            return None
