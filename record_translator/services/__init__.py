"""Remote translation services."""

from .client import ChatCompletionClient, build_translation_prompt, clean_translation
from .translation_service import TranslationService, extract_plain_text, is_blank_html

__all__ = [
    "ChatCompletionClient",
    "TranslationService",
    "build_translation_prompt",
    "clean_translation",
    "extract_plain_text",
    "is_blank_html",
]
