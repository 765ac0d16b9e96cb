"""
Record-level orchestration: the caller-facing entry point.

Classifies a record's fields into scalar and rich-text subsets, runs the
matching field orchestrator for each non-empty subset and aggregates the
outcomes.

Usage:
    orchestrator = RecordOrchestrator(store=SqliteRichTextStore("content.db"))
    result = orchestrator.translate_record(
        project,
        TranslationOptions(source="fr", targets=["en"], context="portfolio"),
    )
    save(project)
    commit_pending_writes(project, result.pending_writes, orchestrator.store)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from ..config import TranslatorConfig, get_config
from ..errors import ConfigurationError
from ..models.record import RecordSchema, schema_for
from ..models.translation import (
    FieldKind,
    Glossary,
    RecordTranslationResult,
    TranslationOptions,
    TranslationOutcome,
    TranslationRequest,
)
from ..services.translation_service import TranslationService
from ..storage import PendingWriteBuffer, RichTextStore
from .rich_text import RichTextFieldOrchestrator
from .scalar import ScalarFieldOrchestrator

logger = logging.getLogger(__name__)

OptionsLike = Union[TranslationOptions, Mapping[str, Any], None]

# Job-payload spellings accepted as keyword overrides
_OPTION_ALIASES = {"from": "source", "to": "targets"}


class RecordOrchestrator:
    """Translate every translatable field of a record."""

    def __init__(
        self,
        translation_service: Optional[TranslationService] = None,
        store: Optional[RichTextStore] = None,
        config: Optional[TranslatorConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or get_config()
        self.translation_service = translation_service or TranslationService()
        self.store = store
        self.scalar = ScalarFieldOrchestrator(
            translation_service=self.translation_service, config=self.config, sleep=sleep
        )
        self._sleep = sleep
        self._rich_text: Optional[RichTextFieldOrchestrator] = None

    @property
    def rich_text(self) -> RichTextFieldOrchestrator:
        """Rich-text orchestrator (needs a content store)."""
        if self._rich_text is None:
            if self.store is None:
                raise ConfigurationError("Rich-text translation requires a content store")
            self._rich_text = RichTextFieldOrchestrator(
                self.store,
                translation_service=self.translation_service,
                config=self.config,
                sleep=self._sleep,
            )
        return self._rich_text

    @staticmethod
    def _coerce_options(options: OptionsLike, overrides: Mapping[str, Any]) -> TranslationOptions:
        if options is None:
            options = TranslationOptions()
        elif isinstance(options, Mapping):
            options = TranslationOptions.from_dict(options)
        if overrides:
            overrides = {_OPTION_ALIASES.get(key, key): value for key, value in overrides.items()}
            merged = {**vars(options), **overrides}
            options = TranslationOptions.from_dict(merged)
        return options

    def build_request(self, record: Any, options: TranslationOptions) -> TranslationRequest:
        """Resolve options against configuration and the record's schema."""
        schema = schema_for(record) or RecordSchema(record_type=type(record).__name__)
        source, targets = self.scalar.resolve_locales(options.source, options.targets)
        names = options.fields if options.fields is not None else schema.translatable_fields()
        return TranslationRequest(
            record_id=schema.owner_id(record),
            source_locale=source,
            target_locales=tuple(targets),
            fields=tuple(schema.describe(names)),
            context=options.context,
            glossary=options.glossary,
            force=options.force,
        )

    def translate_record(
        self,
        record: Any,
        options: OptionsLike = None,
        pending: Optional[PendingWriteBuffer] = None,
        **overrides: Any,
    ) -> RecordTranslationResult:
        """
        Translate scalar and rich-text fields of a record.

        Args:
            record: Record whose type is decorated with @translatable
            options: TranslationOptions or a dict using from/to/fields/... keys
            pending: Buffer for staged rich-text writes (created if omitted)
            **overrides: Individual option overrides (e.g. force=True)

        Returns:
            RecordTranslationResult; its pending_writes must be committed
            after the record is saved if it was not yet persisted

        Raises:
            CapabilityError, ConfigurationError
        """
        opts = self._coerce_options(options, overrides)
        request = self.build_request(record, opts)
        pending = pending if pending is not None else PendingWriteBuffer()
        result = RecordTranslationResult(pending_writes=pending)

        if schema_for(record) is None:
            logger.warning("%s declares no translatable fields", type(record).__name__)

        scalar_fields = request.field_names(FieldKind.SCALAR)
        rich_text_fields = request.field_names(FieldKind.RICH_TEXT)
        # Missing store must fail before any remote call or write
        rich_text = self.rich_text if rich_text_fields else None
        logger.info(
            "Translating %s#%s: %d scalar, %d rich-text field(s) (%s -> %s)",
            type(record).__name__,
            request.record_id,
            len(scalar_fields),
            len(rich_text_fields),
            request.source_locale,
            ", ".join(request.target_locales) or "-",
        )

        if scalar_fields:
            result.scalar_outcomes = self.scalar.translate_record(
                record,
                scalar_fields,
                source=request.source_locale,
                targets=list(request.target_locales),
                context=request.context,
                glossary=request.glossary,
                force=request.force,
            )

        if rich_text is not None:
            result.rich_text_outcomes = rich_text.translate_record(
                record,
                rich_text_fields,
                source=request.source_locale,
                targets=list(request.target_locales),
                context=request.context,
                glossary=request.glossary,
                force=request.force,
                pending=pending,
            )

        logger.info(
            "%d field(s) translated (%d scalar, %d rich-text), %d failed",
            result.translated_count,
            sum(1 for o in result.scalar_outcomes if o.is_translated),
            sum(1 for o in result.rich_text_outcomes if o.is_translated),
            len(result.failed),
        )
        return result

    def translate_scalar_fields(
        self,
        record: Any,
        fields: Sequence[str],
        source: Optional[str] = None,
        targets: Optional[Sequence[str]] = None,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
        force: bool = False,
    ) -> List[TranslationOutcome]:
        """Translate only the given scalar fields."""
        return self.scalar.translate_record(
            record, fields, source=source, targets=targets, context=context, glossary=glossary, force=force
        )

    def translate_rich_text_fields(
        self,
        record: Any,
        fields: Sequence[str],
        source: Optional[str] = None,
        targets: Optional[Sequence[str]] = None,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
        force: bool = False,
        pending: Optional[PendingWriteBuffer] = None,
    ) -> List[TranslationOutcome]:
        """Translate only the given rich-text fields."""
        return self.rich_text.translate_record(
            record,
            fields,
            source=source,
            targets=targets,
            context=context,
            glossary=glossary,
            force=force,
            pending=pending,
        )

    def translate_text(
        self,
        text: str,
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
    ) -> str:
        """Translate a standalone piece of text."""
        return self.translation_service.translate_text(text, source, target, context=context, glossary=glossary)


def translate_record(
    record: Any,
    store: Optional[RichTextStore] = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> RecordTranslationResult:
    """Translate a record with the default stack built from configuration."""
    return RecordOrchestrator(store=store).translate_record(record, options, **overrides)
