from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from flask_babel import gettext as _


@dataclass
class PromptBuildOptions:
    enable_summary: bool = True
    enable_teaser: bool = True
    num_points: int = 3
    reduction_percent: int = 0
    custom_instructions: str = ''


@dataclass
class PromptBundle:
    system_prompt: str
    user_prompt: str


@dataclass
class CharacterBudget:
    total: int
    per_point: int


def character_budget(content_length: int, reduction_percent: int, num_points: int) -> CharacterBudget:
    total = int(content_length * reduction_percent / 100)
    return CharacterBudget(total=total, per_point=int(total / max(1, num_points)))


class PromptBuilder:
    """Builds the system/user prompt pairs sent for summaries and categories."""

    def summary_json_format(self, options: PromptBuildOptions) -> str:
        if options.enable_summary and options.enable_teaser:
            return '{"summary": "• Point 1\\n• Point 2\\n• Point 3", "teaser": "Your teaser paragraph here."}'
        if options.enable_summary:
            return '{"summary": "• Point 1\\n• Point 2\\n• Point 3"}'
        return '{"teaser": "Your teaser paragraph here."}'

    def build_summary(self, *, plain_text: str, options: PromptBuildOptions) -> PromptBundle:
        return PromptBundle(
            system_prompt=self._summary_system_prompt(options),
            user_prompt=self._summary_user_prompt(plain_text, options),
        )

    def _summary_system_prompt(self, options: PromptBuildOptions) -> str:
        directives = [
            _('1. ONLY use information explicitly stated in the source text'),
            _('2. NEVER add interpretations, opinions, or external knowledge'),
            _('3. NEVER hallucinate or invent information not present in the text'),
        ]
        if options.enable_summary:
            directives.append(_('4. Use neutral, objective language for the summary'))
        if options.enable_teaser:
            directives.append(_('5. Make the teaser engaging but still factual'))
        directives.append(_('6. Preserve the original meaning accurately'))
        directives.append(_('7. Respond in the SAME LANGUAGE as the source text'))

        if options.enable_summary and options.enable_teaser:
            directives.append(_('8. Return your response in JSON format with "summary" and "teaser" fields'))
        elif options.enable_summary:
            directives.append(_('8. Return your response in JSON format with "summary" field'))
        else:
            directives.append(_('8. Return your response in JSON format with "teaser" field'))

        prompt = (
            _('You are a precise summarization assistant. Your task is to create factual content '
              'based EXCLUSIVELY on the provided text. You must:')
            + "\n\n"
            + "\n".join(directives)
        )
        if options.custom_instructions:
            prompt += "\n\n" + _('Additional instructions:') + "\n" + options.custom_instructions
        return prompt

    def _summary_user_prompt(self, plain_text: str, options: PromptBuildOptions) -> str:
        parts = []
        if options.enable_summary and options.enable_teaser:
            parts.append(_('Analyze the following article and provide both a summary and a teaser.') + "\n\n")
        elif options.enable_summary:
            parts.append(_('Analyze the following article and provide a summary.') + "\n\n")
        else:
            parts.append(_('Analyze the following article and provide a teaser.') + "\n\n")

        if options.enable_summary:
            parts.append(_('SUMMARY: Create exactly %(count)d key bullet points.', count=options.num_points) + "\n")
            if options.reduction_percent > 0:
                budget = character_budget(len(plain_text), options.reduction_percent, options.num_points)
                parts.append(
                    _(
                        'The total summary must not exceed %(total)d characters '
                        '(approximately %(per_point)d characters per point).',
                        total=budget.total,
                        per_point=budget.per_point,
                    )
                    + "\n"
                )
            parts.append(
                _('- Each point must be a complete, standalone statement') + "\n"
                + _('- Start each point with a bullet (•)') + "\n"
                + _('- Focus on the most important and factual information') + "\n\n"
            )

        if options.enable_teaser:
            parts.append(
                _('TEASER: Write a short, engaging paragraph (2-3 sentences) that entices readers '
                  'to read the full article. The teaser should:') + "\n"
                + _('- Highlight the most compelling aspect of the article') + "\n"
                + _('- Create curiosity without revealing everything') + "\n"
                + _('- Stay factual and based only on the article content') + "\n\n"
            )

        parts.append(
            _('Return ONLY valid JSON in this exact format:') + "\n"
            + self.summary_json_format(options) + "\n\n"
            + _('Source text:') + "\n" + plain_text
        )
        return "".join(parts)

    def build_categories(self, *, plain_text: str, category_names: Sequence[str], max_categories: int) -> PromptBundle:
        system_prompt = (
            _('You are a content categorization assistant. Your task is to analyze text and select '
              'the most relevant categories from a predefined list. You must:')
            + "\n\n"
            + _('1. ONLY select categories from the provided list') + "\n"
            + _('2. Choose categories based on the actual content, not assumptions') + "\n"
            + _('3. Return ONLY a JSON array of category names, nothing else') + "\n"
            + _('4. If no categories match, return an empty array []') + "\n"
            + _('5. Order categories by relevance (most relevant first)')
        )
        user_prompt = (
            _(
                'Select up to %(count)d most relevant categories for the following content from this list: %(names)s',
                count=max_categories,
                names=', '.join(category_names),
            )
            + "\n\n"
            + _('Return ONLY a JSON array of category names. Example: ["Category1", "Category2"]') + "\n\n"
            + _('Content to categorize:') + "\n" + plain_text
        )
        return PromptBundle(system_prompt=system_prompt, user_prompt=user_prompt)
