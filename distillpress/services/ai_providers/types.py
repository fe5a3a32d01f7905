from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class TokenUsage:
    """Token accounting as reported by a provider; ``None`` means not reported."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TokenUsage":
        if not isinstance(data, dict):
            return cls()
        return cls(
            prompt_tokens=_as_int(data.get("prompt_tokens")),
            completion_tokens=_as_int(data.get("completion_tokens")),
            total_tokens=_as_int(data.get("total_tokens")),
        )


@dataclass(frozen=True)
class ModelCatalogEntry:
    """A selectable model exposed by a provider."""

    id: str
    display_name: str
    supports_images: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "supports_images": self.supports_images,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelCatalogEntry":
        return cls(
            id=str(data.get("id") or ""),
            display_name=str(data.get("name") or data.get("id") or ""),
            supports_images=bool(data.get("supports_images")),
        )


@dataclass
class ChatCompletion:
    """Plain-text completion plus whatever usage the provider reported."""

    text: str
    model: str
    usage: TokenUsage
