"""record-translator: translate localizable record fields with an LLM API."""

__version__ = "0.1.0"

from .config import TranslatorConfig, get_config, load_config
from .errors import (
    ApiError,
    AuthenticationError,
    CapabilityError,
    ConfigurationError,
    InvalidResponseError,
    RateLimitError,
    TranslatorError,
)
from .models import (
    OutcomeStatus,
    RecordTranslationResult,
    SkipReason,
    TranslationOptions,
    TranslationOutcome,
    translatable,
)
from .orchestration import RecordOrchestrator, translate_record
from .storage import (
    InMemoryRichTextStore,
    PendingWriteBuffer,
    SqliteRichTextStore,
    commit_pending_writes,
)

__all__ = [
    "__version__",
    "ApiError",
    "AuthenticationError",
    "CapabilityError",
    "ConfigurationError",
    "InMemoryRichTextStore",
    "InvalidResponseError",
    "OutcomeStatus",
    "PendingWriteBuffer",
    "RateLimitError",
    "RecordOrchestrator",
    "RecordTranslationResult",
    "SkipReason",
    "SqliteRichTextStore",
    "TranslationOptions",
    "TranslationOutcome",
    "TranslatorConfig",
    "TranslatorError",
    "commit_pending_writes",
    "get_config",
    "load_config",
    "translatable",
    "translate_record",
]
