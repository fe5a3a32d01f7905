from __future__ import annotations

from typing import Any, List, Optional

from flask_babel import gettext as _

from ..errors import ApiError, InvalidResponseError, MissingApiKeyError
from ..result import Err, Ok, Result
from .base import BaseProvider
from .types import ModelCatalogEntry


class GeminiProvider(BaseProvider):
    """Google Gemini through its OpenAI-compatible endpoint.

    Gemini exposes no catalog we rely on and no cost history, so the
    model list is fixed and the logged cost is always ``None``.
    """

    name = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
    ENDPOINT = "/chat/completions"
    MODELS = (
        ("gemini-flash-latest", "Gemini Flash (fast, cheap)"),
        ("gemini-pro-latest", "Gemini Pro (most capable)"),
    )

    def __init__(self, *, base_url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(base_url=base_url or self.BASE_URL, **kwargs)

    def missing_api_key(self) -> MissingApiKeyError:
        return MissingApiKeyError(_('Gemini API key is required'))

    def api_error(self, status_code: int) -> ApiError:
        return ApiError(status_code, _('Gemini API returned status %(status)d', status=status_code))

    def invalid_response(self) -> InvalidResponseError:
        return InvalidResponseError(_('Invalid Gemini API response'))

    def get_models(self, api_key: str, image_only: bool = False) -> Result[List[ModelCatalogEntry]]:
        if not api_key:
            return Err(self.missing_api_key())
        return Ok([
            ModelCatalogEntry(id=model_id, display_name=display_name, supports_images=True)
            for model_id, display_name in self.MODELS
        ])
