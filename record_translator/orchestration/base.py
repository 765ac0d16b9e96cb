"""
Shared locale x field loop for the scalar and rich-text orchestrators.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from ..config import TranslatorConfig, get_config
from ..models.record import RecordSchema, require_capability
from ..models.translation import FieldKind, Glossary, SkipReason, TranslationOutcome
from ..services.translation_service import TranslationService

logger = logging.getLogger(__name__)


class FieldIO:
    """Per-call read/write access to one record's fields of a single kind."""

    def __init__(self, record: Any, schema: RecordSchema):
        self.record = record
        self.schema = schema

    def declares(self, field: str) -> bool:
        raise NotImplementedError

    def read(self, field: str, locale: str) -> Optional[str]:
        raise NotImplementedError

    def is_blank(self, value: Optional[str]) -> bool:
        raise NotImplementedError

    def write(self, field: str, locale: str, value: str) -> None:
        raise NotImplementedError


class FieldOrchestrator:
    """
    Translate one kind of field on a record across target locales.

    Iteration is sequential: target locales outer, fields inner, both in the
    order given. Each attempted remote call is followed by a fixed pause.
    """

    kind: FieldKind = FieldKind.SCALAR

    def __init__(
        self,
        translation_service: Optional[TranslationService] = None,
        config: Optional[TranslatorConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or get_config()
        self.translation_service = translation_service or TranslationService()
        self._sleep = sleep

    # Subclass hooks

    def _bind(self, record: Any, schema: RecordSchema, **kwargs: Any) -> FieldIO:
        raise NotImplementedError

    def _translate_value(
        self,
        value: str,
        source: str,
        target: str,
        context: Optional[str],
        glossary: Optional[Glossary],
    ) -> str:
        raise NotImplementedError

    # Shared logic

    def resolve_locales(
        self,
        source: Optional[str] = None,
        targets: Optional[Union[str, Sequence[str]]] = None,
    ) -> Tuple[str, List[str]]:
        """Default source and targets from configuration; drop the source from targets."""
        source = str(source) if source else self.config.default_locale
        if targets is None:
            target_list = self.config.target_locales(source)
        elif isinstance(targets, str):
            target_list = [targets]
        else:
            target_list = [str(t) for t in targets]
        return source, [t for t in dict.fromkeys(target_list) if t != source]

    def _pause(self) -> None:
        delay = self.config.rate_limit_delay
        if delay > 0:
            self._sleep(delay)

    def translate_record(
        self,
        record: Any,
        fields: Sequence[str],
        source: Optional[str] = None,
        targets: Optional[Union[str, Sequence[str]]] = None,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
        force: bool = False,
        **bind_kwargs: Any,
    ) -> List[TranslationOutcome]:
        """
        Translate the requested fields of a record into every target locale.

        Returns:
            One outcome per (field, target locale) pair, in iteration order

        Raises:
            CapabilityError: If the record type lacks this field capability
        """
        schema = require_capability(record, self.kind)
        source, target_locales = self.resolve_locales(source, targets)
        io = self._bind(record, schema, **bind_kwargs)
        outcomes: List[TranslationOutcome] = []

        for target in target_locales:
            for field in fields:
                field = str(field)
                if not io.declares(field):
                    logger.debug("%s is not a %s field on %s, skipped", field, self.kind.value, schema.record_type)
                    outcomes.append(TranslationOutcome.skipped(field, target, SkipReason.UNDECLARED_FIELD))
                    continue

                source_value = io.read(field, source)
                if io.is_blank(source_value):
                    logger.debug("No source content for %s (%s)", field, source)
                    outcomes.append(TranslationOutcome.skipped(field, target, SkipReason.EMPTY_SOURCE))
                    continue

                if not force and not io.is_blank(io.read(field, target)):
                    logger.debug("Existing translation for %s (%s), skipped", field, target)
                    outcomes.append(TranslationOutcome.skipped(field, target, SkipReason.ALREADY_TRANSLATED))
                    continue

                logger.info("Translating %s (%s -> %s)", field, source, target)
                try:
                    translated = self._translate_value(source_value, source, target, context, glossary)
                    io.write(field, target, translated)
                except Exception as e:
                    logger.error("Error translating %s (%s -> %s): %s", field, source, target, e)
                    outcomes.append(TranslationOutcome.failed(field, target, e))
                else:
                    outcomes.append(TranslationOutcome.translated(field, target))

                self._pause()

        return outcomes

    def translate_field(
        self,
        record: Any,
        field: str,
        source: str,
        target: str,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
        **bind_kwargs: Any,
    ) -> Optional[str]:
        """
        Translate a single field unconditionally and write it back.

        Returns:
            The translated value, or None when the source is blank

        Raises:
            CapabilityError: If the record type lacks this field capability
            KeyError: If the field is not declared for this capability
            ApiError: On any translation failure
        """
        schema = require_capability(record, self.kind)
        io = self._bind(record, schema, **bind_kwargs)
        field = str(field)
        if not io.declares(field):
            raise KeyError(f"{field} is not a {self.kind.value} field on {schema.record_type}")

        source_value = io.read(field, str(source))
        if io.is_blank(source_value):
            return None

        try:
            translated = self._translate_value(source_value, str(source), str(target), context, glossary)
        except Exception as e:
            logger.error("Error translating %s (%s -> %s): %s", field, source, target, e)
            raise
        io.write(field, str(target), translated)
        return translated
