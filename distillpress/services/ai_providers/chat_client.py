from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import requests
from flask import current_app

from ..errors import ApiError, InvalidResponseError, TransportError
from ..result import Err, Ok, Result
from .types import ChatCompletion, TokenUsage


class ErrorMessages(Protocol):
    def api_error(self, status_code: int) -> ApiError: ...

    def invalid_response(self) -> InvalidResponseError: ...


class _DefaultErrorMessages:
    def api_error(self, status_code: int) -> ApiError:
        return ApiError(status_code)

    def invalid_response(self) -> InvalidResponseError:
        return InvalidResponseError()


def _logger() -> logging.Logger:
    try:
        return current_app.logger
    except Exception:  # pragma: no cover - fallback outside app context
        return logging.getLogger(__name__)


class ChatCompletionClient:
    """Posts OpenAI-style chat completion requests to a single endpoint.

    Shared by every provider; the provider decides the base URL, the
    endpoint path and what happens with the reported usage.
    """

    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        *,
        base_url: str,
        endpoint: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        label: str = "provider",
        errors: Optional[ErrorMessages] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint
        self.label = label
        self.errors = errors or _DefaultErrorMessages()
        self.timeout = float(timeout) if timeout is not None else float(self.DEFAULT_TIMEOUT)
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    def send(
        self,
        *,
        api_key: str,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> Result[ChatCompletion]:
        body = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        _logger().debug(
            "Chat completion request",
            extra={"event": "chat_request", "provider": self.label, "model": model},
        )
        try:
            response = self._session.post(
                self.url,
                json=body,
                headers=headers,
                timeout=self.timeout,
                verify=True,
            )
        except requests.RequestException as exc:
            _logger().error(
                "Chat completion transport failure",
                extra={"event": "chat_transport_error", "provider": self.label, "error": str(exc)},
            )
            return Err(TransportError(str(exc) or None))

        if response.status_code != 200:
            try:
                response_text = (response.text or "")[:500]
            except Exception:
                response_text = ""
            _logger().error(
                "Chat completion returned an error status",
                extra={
                    "event": "chat_api_error",
                    "provider": self.label,
                    "status_code": response.status_code,
                    "response": response_text,
                },
            )
            return Err(self.errors.api_error(response.status_code))

        try:
            payload: Any = response.json()
        except ValueError:
            payload = None

        text = self._extract_text(payload)
        if text is None:
            _logger().error(
                "Chat completion response has no message content",
                extra={"event": "chat_invalid_response", "provider": self.label},
            )
            return Err(self.errors.invalid_response())

        return Ok(
            ChatCompletion(
                text=text,
                model=model,
                usage=TokenUsage.from_dict(payload.get("usage")),
            )
        )

    @staticmethod
    def _extract_text(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None
