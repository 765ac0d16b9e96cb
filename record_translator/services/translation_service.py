"""
Text and HTML translation on top of the chat-completion client.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Protocol

from ..errors import ApiError
from ..models.translation import Glossary

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


class TranslationClient(Protocol):
    def translate(
        self,
        text: str,
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
    ) -> str:
        ...


def is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def extract_plain_text(html_content: Any) -> str:
    """
    Plain text of HTML-ish content.

    Content without tag-like markup is returned as is; otherwise every tag is
    replaced by a space and whitespace is collapsed.
    """
    text = "" if html_content is None else str(html_content)
    if not _TAG_PATTERN.search(text):
        return text
    return _WHITESPACE_PATTERN.sub(" ", _TAG_PATTERN.sub(" ", text)).strip()


def is_blank_html(html_content: Any) -> bool:
    """True when content has no text once markup is removed."""
    return is_blank(html_content) or not extract_plain_text(html_content).strip()


def preserve_html_structure(original_html: str, original_text: str, translated_text: str) -> str:
    """
    Rebuild markup around translated text.

    Placeholder: returns the translated plain text only. Re-applying the
    original tags needs structure-aware parsing and is not implemented.
    """
    return translated_text


class TranslationService:
    """Translate plain text and HTML content, skipping no-op calls."""

    def __init__(self, client: Optional[TranslationClient] = None):
        if client is None:
            from .client import ChatCompletionClient

            client = ChatCompletionClient()
        self.client = client

    def translate_text(
        self,
        text: Optional[str],
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
    ) -> str:
        """
        Translate plain text.

        Returns "" for blank input and the input unchanged when source and
        target match; neither case reaches the API.

        Raises:
            ApiError: Propagated unchanged from the client
        """
        if is_blank(text):
            return ""
        if str(source) == str(target):
            return str(text)

        try:
            return self.client.translate(
                str(text), str(source), str(target), context=context, glossary=glossary
            )
        except ApiError as e:
            logger.error("Translation failed (%s -> %s): %s", source, target, e)
            raise

    def translate_html(
        self,
        html_content: Optional[str],
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
    ) -> str:
        """
        Translate HTML content as plain text.

        The markup is not carried over; see preserve_html_structure.

        Raises:
            ApiError: Propagated unchanged from the client
        """
        if is_blank(html_content):
            return ""
        html = str(html_content)
        if str(source) == str(target):
            return html

        plain_text = extract_plain_text(html)
        if not plain_text.strip():
            return html

        translated = self.translate_text(plain_text, source, target, context=context, glossary=glossary)
        return preserve_html_structure(html, plain_text, translated)
