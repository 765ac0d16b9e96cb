"""
Rich-text-field orchestration: long HTML-bearing content kept in a content
store, one row per (owner, field, locale).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Union

from ..config import TranslatorConfig
from ..models.record import RecordSchema
from ..models.translation import FieldKind, Glossary, TranslationOutcome
from ..services.translation_service import TranslationService, is_blank_html
from ..storage import PendingWriteBuffer, RichTextStore
from .base import FieldIO, FieldOrchestrator

logger = logging.getLogger(__name__)


class RichTextFieldIO(FieldIO):
    """
    Content access for rich-text fields.

    Reads check the pending buffer before the store. Writes are always staged
    and also upserted right away when the record is already persisted.
    """

    def __init__(
        self,
        record: Any,
        schema: RecordSchema,
        store: RichTextStore,
        pending: PendingWriteBuffer,
    ):
        super().__init__(record, schema)
        self.store = store
        self.pending = pending

    def declares(self, field: str) -> bool:
        return self.schema.declares_rich_text(field)

    def read(self, field: str, locale: str) -> Optional[str]:
        staged = self.pending.get(field, locale)
        if not is_blank_html(staged):
            return staged

        owner_id = self.schema.owner_id(self.record)
        if owner_id is None:
            return None
        content = self.store.find(owner_id, self.schema.record_type, field, locale)
        if is_blank_html(content):
            return None
        return content

    def is_blank(self, value: Optional[str]) -> bool:
        return is_blank_html(value)

    def write(self, field: str, locale: str, value: str) -> None:
        self.pending.stage(field, locale, value)
        if self.schema.persisted(self.record):
            self.store.upsert(self.schema.owner_id(self.record), self.schema.record_type, field, locale, value)
        else:
            logger.debug("%s not saved yet; %s (%s) staged until commit", self.schema.record_type, field, locale)


class RichTextFieldOrchestrator(FieldOrchestrator):
    """Translate rich-text fields with the HTML translator."""

    kind = FieldKind.RICH_TEXT

    def __init__(
        self,
        store: RichTextStore,
        translation_service: Optional[TranslationService] = None,
        config: Optional[TranslatorConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(translation_service=translation_service, config=config, sleep=sleep)
        self.store = store

    def _bind(
        self,
        record: Any,
        schema: RecordSchema,
        pending: Optional[PendingWriteBuffer] = None,
        **kwargs: Any,
    ) -> FieldIO:
        return RichTextFieldIO(record, schema, self.store, pending if pending is not None else PendingWriteBuffer())

    def _translate_value(
        self,
        value: str,
        source: str,
        target: str,
        context: Optional[str],
        glossary: Optional[Glossary],
    ) -> str:
        return self.translation_service.translate_html(
            value, source, target, context=context, glossary=glossary
        )

    def translate_record(
        self,
        record: Any,
        fields: Sequence[str],
        source: Optional[str] = None,
        targets: Optional[Union[str, Sequence[str]]] = None,
        context: Optional[str] = None,
        glossary: Optional[Glossary] = None,
        force: bool = False,
        pending: Optional[PendingWriteBuffer] = None,
    ) -> List[TranslationOutcome]:
        """
        Translate rich-text fields; see FieldOrchestrator.translate_record.

        Args:
            pending: Buffer receiving staged writes. Pass one in to flush it
                with commit_pending_writes after saving a new record; a
                throwaway buffer is used otherwise.
        """
        return super().translate_record(
            record,
            fields,
            source=source,
            targets=targets,
            context=context,
            glossary=glossary,
            force=force,
            pending=pending,
        )
