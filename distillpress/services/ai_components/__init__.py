from .prompt_builder import CharacterBudget, PromptBuilder, PromptBuildOptions, PromptBundle, character_budget
from .response_parser import extract_json

__all__ = [
    'CharacterBudget',
    'PromptBuilder',
    'PromptBuildOptions',
    'PromptBundle',
    'character_budget',
    'extract_json',
]
