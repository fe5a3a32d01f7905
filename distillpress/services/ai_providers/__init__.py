"""Chat-completion providers (POE, Google Gemini) behind one interface."""

from __future__ import annotations

from typing import Dict, Type

from .base import BaseProvider  # noqa: F401
from .chat_client import ChatCompletionClient  # noqa: F401
from .gemini_provider import GeminiProvider  # noqa: F401
from .poe_provider import PoeProvider  # noqa: F401
from .types import ChatCompletion, ModelCatalogEntry, TokenUsage  # noqa: F401

PROVIDERS: Dict[str, Type[BaseProvider]] = {
	PoeProvider.name: PoeProvider,
	GeminiProvider.name: GeminiProvider,
}

__all__ = [
	"BaseProvider",
	"ChatCompletionClient",
	"PoeProvider",
	"GeminiProvider",
	"PROVIDERS",
	"ChatCompletion",
	"ModelCatalogEntry",
	"TokenUsage",
]
