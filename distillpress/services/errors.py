"""Error kinds surfaced by providers and orchestration handlers.

Each kind carries a stable ``code`` (used by API clients) and a short,
translated, user-facing ``message``. Errors travel inside :class:`Err`
results rather than being raised past the service boundary.
"""

from __future__ import annotations

from typing import Optional

from flask_babel import gettext as _


class DistillPressError(Exception):
    code = 'distillpress_error'
    http_status = 400

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return _('An error occurred')

    def to_dict(self):
        return {'message': self.message, 'code': self.code}


class MissingApiKeyError(DistillPressError):
    code = 'missing_api_key'

    def default_message(self) -> str:
        return _('API key is required')


class TransportError(DistillPressError):
    code = 'http_request_failed'
    http_status = 502

    def default_message(self) -> str:
        return _('Could not reach the AI provider')


class ApiError(DistillPressError):
    code = 'api_error'
    http_status = 502

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    def default_message(self) -> str:
        return _('API returned status %(status)d', status=self.status_code)

    def to_dict(self):
        payload = super().to_dict()
        payload['status_code'] = self.status_code
        return payload


class InvalidResponseError(DistillPressError):
    code = 'invalid_response'
    http_status = 502

    def default_message(self) -> str:
        return _('Invalid API response')


class JsonError(DistillPressError):
    code = 'json_error'
    http_status = 502

    def default_message(self) -> str:
        return _('Failed to parse API response')


class EmptyContentError(DistillPressError):
    code = 'empty_content'

    def default_message(self) -> str:
        return _('No content provided.')


class FeaturesDisabledError(DistillPressError):
    code = 'features_disabled'

    def default_message(self) -> str:
        return _('Both summary and teaser are disabled in settings.')


class CategoryParseError(DistillPressError):
    code = 'category_parse_error'
    http_status = 502

    def default_message(self) -> str:
        return _('Failed to parse category response.')


class NoCategoriesAvailableError(DistillPressError):
    code = 'no_categories_available'

    def default_message(self) -> str:
        return _('No categories available.')


class NoCategoriesFoundError(DistillPressError):
    code = 'no_categories_found'

    def default_message(self) -> str:
        return _('No matching categories found.')


class PermissionDeniedError(DistillPressError):
    code = 'permission_denied'
    http_status = 403

    def default_message(self) -> str:
        return _('Permission denied.')
