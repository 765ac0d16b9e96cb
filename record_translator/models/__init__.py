"""Data model for record translation."""

from .record import (
    RecordSchema,
    ScalarAccessor,
    locale_mapping,
    require_capability,
    schema_for,
    suffixed_attributes,
    translatable,
)
from .translation import (
    FieldDescriptor,
    FieldKind,
    Glossary,
    OutcomeStatus,
    RecordTranslationResult,
    RetryPolicy,
    SkipReason,
    TranslationOptions,
    TranslationOutcome,
    TranslationRequest,
)

__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "Glossary",
    "OutcomeStatus",
    "RecordSchema",
    "RecordTranslationResult",
    "RetryPolicy",
    "ScalarAccessor",
    "SkipReason",
    "TranslationOptions",
    "TranslationOutcome",
    "TranslationRequest",
    "locale_mapping",
    "require_capability",
    "schema_for",
    "suffixed_attributes",
    "translatable",
]
