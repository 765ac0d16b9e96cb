"""
Pytest configuration and fixtures for the record-translator test suite.

This module provides reusable fixtures for:
- A deterministic TranslatorConfig (no .env, no real API key)
- A fake translation client that records calls
- Sample translatable record types
- A sleep recorder replacing blocking waits
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Ensure project root is on sys.path to import record_translator.* modules
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from record_translator.config import TranslatorConfig, reset_config  # noqa: E402
from record_translator.models import locale_mapping, translatable  # noqa: E402
from record_translator.services.translation_service import TranslationService  # noqa: E402
from record_translator.storage import InMemoryRichTextStore  # noqa: E402


class FakeClient:
    """
    Stand-in for ChatCompletionClient.

    Answers "<target>:<text>" unless the text is listed in ``failures``
    (raise that exception) or ``answers`` (return that value).
    """

    def __init__(self, answers: Optional[Dict[str, str]] = None, failures: Optional[Dict[str, Exception]] = None):
        self.answers = answers or {}
        self.failures = failures or {}
        self.calls: List[dict] = []

    def translate(self, text, source, target, context=None, glossary=None):
        self.calls.append(
            {"text": text, "source": source, "target": target, "context": context, "glossary": glossary}
        )
        if text in self.failures:
            raise self.failures[text]
        if text in self.answers:
            return self.answers[text]
        return f"{target}:{text}"


# ============================================================================
# Sample record types
# ============================================================================


@translatable(scalar=["title", "summary"], rich_text=["context"])
@dataclass
class Project:
    id: Optional[int] = None
    title_fr: Optional[str] = None
    title_en: Optional[str] = None
    title_de: Optional[str] = None
    summary_fr: Optional[str] = None
    summary_en: Optional[str] = None
    summary_de: Optional[str] = None


# "description" is declared by both kinds; rich-text must win
@translatable(scalar=["title", "description"], rich_text=["description"])
@dataclass
class Article:
    id: Optional[int] = None
    title_fr: Optional[str] = None
    title_en: Optional[str] = None
    description_fr: Optional[str] = None
    description_en: Optional[str] = None


@translatable(scalar={"name": locale_mapping("names")})
@dataclass
class Tag:
    id: Optional[int] = None
    names: Optional[Dict[str, str]] = None


@translatable(rich_text=["body"])
@dataclass
class Page:
    id: Optional[int] = None


@dataclass
class Untranslatable:
    id: Optional[int] = None
    title_fr: Optional[str] = None


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_cached_config():
    """Never leak a cached process-wide config between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Config with three locales, short retry delays and a pacing delay."""
    return TranslatorConfig(
        api_key="test-key",
        api_url="https://api.test",
        model="test-model",
        retry_delays=[1.0, 2.0, 3.0],
        rate_limit_delay=0.5,
        default_locale="fr",
        available_locales=["fr", "en", "de"],
    )


@pytest.fixture
def sleeps():
    """Collects requested sleep durations instead of blocking."""
    return []


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def translation_service(fake_client):
    return TranslationService(fake_client)


@pytest.fixture
def store():
    return InMemoryRichTextStore()
