from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

import requests
from flask import current_app

from ..errors import ApiError, InvalidResponseError, MissingApiKeyError
from ..result import Err, Ok, Result
from .chat_client import ChatCompletionClient
from .types import ModelCatalogEntry

if TYPE_CHECKING:
    from ..model_cache import ModelCache
    from ..usage_log import UsageLog


class BaseProvider:
    """Common surface of every chat-completion provider.

    Subclasses set ``name``, ``ENDPOINT`` and implement :meth:`get_models`;
    the request itself is delegated to a shared :class:`ChatCompletionClient`.
    """

    name = "base"
    ENDPOINT = "/chat/completions"
    DEFAULT_TEMPERATURE = 0.7
    DEFAULT_MAX_TOKENS = 1000

    def __init__(
        self,
        *,
        base_url: str,
        cache: "ModelCache",
        usage_log: "UsageLog",
        session: Optional[requests.Session] = None,
        chat_timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.usage_log = usage_log
        self._session = session or requests.Session()
        self.client = ChatCompletionClient(
            base_url=self.base_url,
            endpoint=self.ENDPOINT,
            session=self._session,
            timeout=chat_timeout,
            label=self.name,
            errors=self,
        )

    @property
    def logger(self) -> logging.Logger:
        try:
            return current_app.logger
        except Exception:
            return logging.getLogger(__name__)

    # error messages handed to the chat client

    def missing_api_key(self) -> MissingApiKeyError:
        return MissingApiKeyError()

    def api_error(self, status_code: int) -> ApiError:
        return ApiError(status_code)

    def invalid_response(self) -> InvalidResponseError:
        return InvalidResponseError()

    # chat

    def chat_completion(
        self,
        api_key: str,
        model: str,
        prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> Result[str]:
        messages = [{"role": "user", "content": prompt}]
        return self._complete("chat_completion", api_key, model, messages, temperature, max_tokens)

    def chat_with_system(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> Result[str]:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return self._complete("chat_with_system", api_key, model, messages, temperature, max_tokens)

    def _complete(
        self,
        action_type: str,
        api_key: str,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> Result[str]:
        if not api_key:
            return Err(self.missing_api_key())

        result = self.client.send(
            api_key=api_key,
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not result.ok:
            return result

        completion = result.value
        self.usage_log.record(
            action_type,
            completion.model,
            completion.usage,
            cost_points=self._cost_points(api_key),
        )
        return Ok(completion.text)

    def _cost_points(self, api_key: str) -> Optional[int]:
        """Points charged for the request that just completed, when the provider reports it."""
        return None

    # catalog

    def get_models(self, api_key: str, image_only: bool = False) -> Result[List[ModelCatalogEntry]]:
        raise NotImplementedError

    def clear_models_cache(self, api_key: str) -> None:
        self.cache.clear(api_key)
