"""Orchestration handlers: summary/teaser generation and auto-categorisation.

Each handler takes a :class:`DistillContext`, performs at most one
provider call and returns an ``Ok``/``Err`` result. Nothing is persisted
unless the provider call succeeded and produced usable output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flask import current_app

from distillpress.utils.html import strip_html
from distillpress.utils.validators import to_int

from .ai_components import PromptBuilder, PromptBuildOptions, extract_json
from .ai_providers.types import ModelCatalogEntry
from .context import DistillContext
from .errors import (
    CategoryParseError,
    EmptyContentError,
    FeaturesDisabledError,
    NoCategoriesAvailableError,
    NoCategoriesFoundError,
)
from .host_store import SUMMARY_META_KEY, TEASER_META_KEY
from .result import Err, Ok, Result

SUMMARY_TEMPERATURE = 0.4
SUMMARY_MAX_TOKENS = 2500
CATEGORY_TEMPERATURE = 0.2
CATEGORY_MAX_TOKENS = 500


def _logger() -> logging.Logger:
    try:
        return current_app.logger
    except Exception:  # pragma: no cover - fallback outside app context
        return logging.getLogger(__name__)


@dataclass
class GenerationRequest:
    content: str
    post_id: Optional[int] = None
    num_points: int = 3
    reduction_percent: int = 0

    def __post_init__(self) -> None:
        self.num_points = to_int(self.num_points, 3, minimum=1, maximum=20)
        self.reduction_percent = to_int(self.reduction_percent, 0, minimum=0, maximum=100)


@dataclass
class GenerationResult:
    summary: str = ''
    teaser: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {'summary': self.summary, 'teaser': self.teaser}


@dataclass
class CategorizationRequest:
    content: str
    max_categories: int = 3
    post_id: Optional[int] = None

    def __post_init__(self) -> None:
        self.max_categories = to_int(self.max_categories, 3, minimum=1, maximum=20)


@dataclass
class CategorizationResult:
    category_ids: List[int] = field(default_factory=list)
    category_names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'category_ids': list(self.category_ids), 'category_names': list(self.category_names)}


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ''


def generate_summary(ctx: DistillContext, request: GenerationRequest) -> Result[GenerationResult]:
    settings = ctx.settings
    if not settings.enable_summary and not settings.enable_teaser:
        return Err(FeaturesDisabledError())

    plain_text = strip_html(request.content)
    if not plain_text:
        return Err(EmptyContentError())

    bundle = PromptBuilder().build_summary(
        plain_text=plain_text,
        options=PromptBuildOptions(
            enable_summary=settings.enable_summary,
            enable_teaser=settings.enable_teaser,
            num_points=request.num_points,
            reduction_percent=request.reduction_percent,
            custom_instructions=settings.custom_instructions,
        ),
    )

    completion = ctx.provider.chat_with_system(
        settings.api_key,
        settings.model,
        bundle.system_prompt,
        bundle.user_prompt,
        SUMMARY_TEMPERATURE,
        SUMMARY_MAX_TOKENS,
    )
    if not completion.ok:
        return completion

    raw_text = completion.value
    parsed = extract_json(raw_text)
    result = GenerationResult()
    if isinstance(parsed, dict):
        result.summary = _trimmed(parsed.get('summary'))
        result.teaser = _trimmed(parsed.get('teaser'))
    elif settings.enable_summary:
        _logger().info(
            "Summary response was not JSON; using the raw completion",
            extra={"event": "summary_parse_fallback", "post_id": request.post_id},
        )
        result.summary = raw_text.strip()

    post = ctx.host.get_post(request.post_id)
    if post is not None:
        if settings.enable_summary and result.summary:
            ctx.host.update_post_meta(post, SUMMARY_META_KEY, result.summary)
        if settings.enable_teaser and result.teaser:
            ctx.host.update_post_meta(post, TEASER_META_KEY, result.teaser)

    return Ok(result)


def auto_categorize(ctx: DistillContext, request: CategorizationRequest) -> Result[CategorizationResult]:
    settings = ctx.settings
    plain_text = strip_html(request.content)
    if not plain_text:
        return Err(EmptyContentError())

    default_category = ctx.host.get_category(settings.default_category_id)

    categories = ctx.host.list_categories()
    if not categories:
        return Err(NoCategoriesAvailableError())

    bundle = PromptBuilder().build_categories(
        plain_text=plain_text,
        category_names=[category.name for category in categories],
        max_categories=request.max_categories,
    )
    completion = ctx.provider.chat_with_system(
        settings.api_key,
        settings.model,
        bundle.system_prompt,
        bundle.user_prompt,
        CATEGORY_TEMPERATURE,
        CATEGORY_MAX_TOKENS,
    )
    if not completion.ok:
        return completion

    selected = extract_json(completion.value)
    if not isinstance(selected, list):
        return Err(CategoryParseError())

    by_name = {}
    for category in categories:
        by_name.setdefault(category.name.lower(), category)

    result = CategorizationResult()
    for name in selected:
        if not isinstance(name, str):
            continue
        category = by_name.get(name.lower())
        if category is None or category.id in result.category_ids:
            continue
        result.category_ids.append(category.id)
        result.category_names.append(category.name)

    del result.category_ids[request.max_categories:]
    del result.category_names[request.max_categories:]

    # the default category is applied on top of the model's picks
    if default_category is not None and default_category.id not in result.category_ids:
        result.category_ids.insert(0, default_category.id)
        result.category_names.insert(0, default_category.name)

    if not result.category_ids:
        return Err(NoCategoriesFoundError())

    post = ctx.host.get_post(request.post_id)
    if post is not None:
        ctx.host.set_post_categories(post, result.category_ids)

    return Ok(result)


def get_models(ctx: DistillContext, *, image_only: bool = False) -> Result[List[ModelCatalogEntry]]:
    return ctx.provider.get_models(ctx.settings.api_key, image_only)


def get_post_state(ctx: DistillContext, post_id: Optional[int]) -> Dict[str, Any]:
    """Stored summary/teaser for a post plus the defaults the editor panel starts from."""
    settings = ctx.settings
    post = ctx.host.get_post(post_id)
    return {
        'post_id': post.id if post is not None else None,
        'summary': ctx.host.get_post_meta(post, SUMMARY_META_KEY) if post is not None else '',
        'teaser': ctx.host.get_post_meta(post, TEASER_META_KEY) if post is not None else '',
        'category_ids': [category.id for category in post.categories] if post is not None else [],
        'defaults': {
            'num_points': settings.default_points,
            'reduction_percent': settings.default_reduction_percent,
            'max_categories': settings.default_max_categories,
        },
        'enable_summary': settings.enable_summary,
        'enable_teaser': settings.enable_teaser,
        'provider': settings.provider,
        'model': settings.model,
    }
