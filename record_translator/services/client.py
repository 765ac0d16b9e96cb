"""
HTTP client for the chat-completion translation API.

One POST per translation; HTTP 429 responses are retried on the configured
backoff schedule, every other failure is raised immediately.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
    wait_none,
)

from ..config import TranslatorConfig, get_config
from ..errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    InvalidResponseError,
    RateLimitError,
)
from ..models.translation import Glossary, RetryPolicy

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

# Quote characters the model sometimes wraps its answer in
_QUOTES = ("\"", "'")

TRANSLATION_RULES = (
    "- Preserve HTML formatting if present",
    "- Keep the style and tone of the original text",
    "- Reply with the translation only, without any comments",
)


def format_glossary(glossary: Optional[Glossary]) -> Optional[str]:
    """Render a glossary for the prompt; None when there is nothing to add."""
    if glossary is None:
        return None
    if isinstance(glossary, str):
        return glossary if glossary.strip() else None
    if isinstance(glossary, Mapping) and glossary:
        return ", ".join(f"{term} → {translation}" for term, translation in glossary.items())
    return None


def build_translation_prompt(
    text: str,
    source: str,
    target: str,
    context: Optional[str] = None,
    glossary: Optional[Glossary] = None,
) -> str:
    """Build the single user message sent to the model."""
    parts = [f"Translate the following text from {source} to {target}."]

    if context:
        parts.append(f"\nCONTEXT: {context}")

    glossary_text = format_glossary(glossary)
    if glossary_text is not None:
        if isinstance(glossary, str):
            parts.append(f"\nGLOSSARY: {glossary_text}")
        else:
            parts.append(f"\nGLOSSARY (follow strictly): {glossary_text}")

    parts.append("\n\nTEXT TO TRANSLATE:")
    parts.append(text)
    parts.append("\n\nRULES:")
    parts.extend(TRANSLATION_RULES)

    return "\n".join(parts)


def clean_translation(content: str) -> str:
    """Trim whitespace and one matching pair of surrounding quotes."""
    cleaned = content.strip()
    if len(cleaned) >= 2 and cleaned[0] in _QUOTES and cleaned[-1] == cleaned[0]:
        cleaned = cleaned[1:-1]
    return cleaned


def _error_detail(response: requests.Response) -> str:
    """Best-effort error message from an API error body."""
    try:
        data = response.json()
    except ValueError:
        return (response.text or "")[:200]
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if data.get("message"):
            return str(data["message"])
        if isinstance(err, str):
            return err
    return ""


class ChatCompletionClient:
    """
    Translation client for an OpenAI-style chat-completion endpoint.

    Thread Safety:
        Instances hold no mutable state after construction and can be shared,
        but retries block the calling thread.
    """

    def __init__(
        self,
        config: Optional[TranslatorConfig] = None,
        *,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the client.

        Args:
            config: Translator configuration (defaults to get_config())
            api_key: Overrides config.api_key
            api_url: Overrides config.api_url
            model: Overrides config.model
            retry_policy: Overrides config.retry_delays
            sleep: Function used to wait between retries

        Raises:
            ConfigurationError: If no usable API key is available
        """
        self.config = config or get_config()
        if api_key is None:
            api_key = self.config.require_api_key()
        elif not api_key.strip():
            raise ConfigurationError("API key must not be blank")
        self._api_key = api_key
        self.api_url = (api_url or self.config.api_url).rstrip("/")
        self.model = model or self.config.model
        self.temperature = self.config.temperature
        self.request_timeout = self.config.request_timeout
        self.retry_policy = retry_policy or RetryPolicy.from_delays(self.config.retry_delays)
        self._sleep = sleep

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}{CHAT_COMPLETIONS_PATH}"

    def translate(
        self,
        text: str,
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
    ) -> str:
        """
        Translate text with automatic retry on rate limits.

        Returns:
            Translated text, trimmed and unquoted

        Raises:
            AuthenticationError: On HTTP 401
            RateLimitError: When HTTP 429 persists after every retry
            InvalidResponseError: On unparseable or empty responses
            ApiError: On any other HTTP or transport failure
        """
        logger.info("Translating %d characters (%s -> %s)", len(text), source, target)
        prompt = build_translation_prompt(text, source, target, context=context, glossary=glossary)
        content = self._request_with_retry(prompt)
        translated = clean_translation(content)
        logger.info("Translation finished: %d characters", len(translated))
        return translated

    def _retrying(self) -> Retrying:
        delays = self.retry_policy.delays
        return Retrying(
            stop=stop_after_attempt(self.retry_policy.max_attempts),
            wait=wait_chain(*[wait_fixed(d) for d in delays]) if delays else wait_none(),
            retry=retry_if_exception_type(RateLimitError),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _request_with_retry(self, prompt: str) -> str:
        return self._retrying()(self._execute_request, prompt)

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _execute_request(self, prompt: str) -> str:
        """Issue one request and return the raw message content."""
        try:
            resp = requests.post(
                self.endpoint,
                headers=self._headers(),
                data=json.dumps(self._payload(prompt)),
                timeout=self.request_timeout,
            )
        except requests.Timeout as e:
            raise ApiError(f"Request timed out: {e}") from e
        except requests.RequestException as e:
            raise ApiError(f"HTTP error: {e}") from e

        self._raise_for_status(resp)
        return self._extract_content(resp)

    @staticmethod
    def _raise_for_status(resp: requests.Response) -> None:
        status = resp.status_code
        if status < 400:
            return
        detail = _error_detail(resp)
        suffix = f": {detail}" if detail else ""
        if status == 401:
            raise AuthenticationError(f"Invalid API key{suffix}", status_code=status)
        if status == 429:
            raise RateLimitError(f"Rate limit exceeded{suffix}", status_code=status)
        if status < 500:
            raise ApiError(f"Client error ({status}){suffix}", status_code=status)
        raise ApiError(f"Server error ({status}){suffix}", status_code=status)

    @staticmethod
    def _extract_content(resp: requests.Response) -> str:
        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidResponseError(f"Invalid JSON in API response: {e}", status_code=resp.status_code) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise InvalidResponseError("Invalid API response (missing content)", status_code=resp.status_code) from e

        if not isinstance(content, str) or not content.strip():
            raise InvalidResponseError("Invalid API response (empty content)", status_code=resp.status_code)
        return content
