"""
Translation data model: requests, outcomes and aggregated results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from ..storage import PendingWriteBuffer

# Glossary accepted at call time: a term mapping or free-form text
Glossary = Union[Mapping[str, str], str]


class FieldKind(str, Enum):
    """Storage kind of a translatable field."""
    SCALAR = "scalar"
    RICH_TEXT = "rich_text"


class OutcomeStatus(str, Enum):
    """Result of one (field, locale) attempt."""
    TRANSLATED = "translated"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    """Why a (field, locale) pair was not sent for translation."""
    EMPTY_SOURCE = "empty source"
    ALREADY_TRANSLATED = "already translated"
    UNDECLARED_FIELD = "undeclared field"


@dataclass(frozen=True)
class FieldDescriptor:
    """A translatable field and the kind of storage behind it."""

    name: str
    kind: FieldKind


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule for rate-limited calls.

    ``len(delays)`` is the maximum number of retries; ``delays[n]`` is the wait
    before retry ``n + 1``.
    """

    delays: Tuple[float, ...] = (2.0, 4.0, 8.0, 16.0)

    @classmethod
    def from_delays(cls, delays: Sequence[float]) -> RetryPolicy:
        return cls(delays=tuple(float(d) for d in delays))

    @property
    def max_retries(self) -> int:
        return len(self.delays)

    @property
    def max_attempts(self) -> int:
        return len(self.delays) + 1


@dataclass
class TranslationOptions:
    """Caller-facing options bundle for a record translation."""

    source: Optional[str] = None
    targets: Optional[Sequence[str]] = None
    fields: Optional[Sequence[str]] = None
    context: Optional[str] = None
    glossary: Optional[Glossary] = None
    force: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TranslationOptions:
        """Accept the loose ``from``/``to`` spelling used by job payloads."""
        targets = data.get("targets")
        if targets is None:
            targets = data.get("to")
        if isinstance(targets, str):
            targets = [targets]
        fields = data.get("fields")
        if isinstance(fields, str):
            fields = [fields]
        return cls(
            source=data.get("source") or data.get("from"),
            targets=targets,
            fields=fields,
            context=data.get("context"),
            glossary=data.get("glossary"),
            force=bool(data.get("force", False)),
        )


@dataclass(frozen=True)
class TranslationRequest:
    """Resolved parameters for one orchestration call."""

    record_id: Any
    source_locale: str
    target_locales: Tuple[str, ...]
    fields: Tuple[FieldDescriptor, ...]
    context: Optional[str] = None
    glossary: Optional[Glossary] = None
    force: bool = False

    def __post_init__(self) -> None:
        # Source locale never appears among the targets
        targets = tuple(
            loc for loc in dict.fromkeys(str(t) for t in self.target_locales)
            if loc != str(self.source_locale)
        )
        object.__setattr__(self, "target_locales", targets)

    def field_names(self, kind: FieldKind) -> List[str]:
        return [f.name for f in self.fields if f.kind == kind]


@dataclass(frozen=True)
class TranslationOutcome:
    """Outcome of one (field, target locale) pair."""

    field: str
    locale: str
    status: OutcomeStatus
    reason: Optional[SkipReason] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def translated(cls, field: str, locale: str) -> TranslationOutcome:
        return cls(field=field, locale=locale, status=OutcomeStatus.TRANSLATED)

    @classmethod
    def skipped(cls, field: str, locale: str, reason: SkipReason) -> TranslationOutcome:
        return cls(field=field, locale=locale, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, field: str, locale: str, error: BaseException) -> TranslationOutcome:
        return cls(
            field=field,
            locale=locale,
            status=OutcomeStatus.FAILED,
            error_kind=type(error).__name__,
            message=str(error),
        )

    @property
    def is_translated(self) -> bool:
        return self.status == OutcomeStatus.TRANSLATED

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "field": self.field,
            "locale": self.locale,
            "status": self.status.value,
        }
        if self.reason is not None:
            result["reason"] = self.reason.value
        if self.error_kind is not None:
            result["error_kind"] = self.error_kind
            result["message"] = self.message
        return result


@dataclass
class RecordTranslationResult:
    """Aggregated outcomes of a record translation, built fresh per call."""

    scalar_outcomes: List[TranslationOutcome] = field(default_factory=list)
    rich_text_outcomes: List[TranslationOutcome] = field(default_factory=list)
    # Rich-text writes not yet flushed to the store
    pending_writes: Optional["PendingWriteBuffer"] = None

    @property
    def outcomes(self) -> List[TranslationOutcome]:
        return [*self.scalar_outcomes, *self.rich_text_outcomes]

    @property
    def translated_count(self) -> int:
        return sum(1 for o in self.outcomes if o.is_translated)

    @property
    def failed(self) -> List[TranslationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scalar": [o.to_dict() for o in self.scalar_outcomes],
            "rich_text": [o.to_dict() for o in self.rich_text_outcomes],
        }
