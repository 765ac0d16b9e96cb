"""
Scalar-field orchestration: short per-locale attributes such as a title.
"""

from __future__ import annotations

from typing import Any, Optional

from ..models.record import RecordSchema
from ..models.translation import FieldKind, Glossary
from ..services.translation_service import is_blank
from .base import FieldIO, FieldOrchestrator


class ScalarFieldIO(FieldIO):
    """Reads and writes through the accessors registered on the record type."""

    def declares(self, field: str) -> bool:
        return self.schema.declares_scalar(field)

    def read(self, field: str, locale: str) -> Optional[str]:
        return self.schema.scalar_accessor(field).get(self.record, locale)

    def is_blank(self, value: Optional[str]) -> bool:
        return is_blank(value)

    def write(self, field: str, locale: str, value: str) -> None:
        self.schema.scalar_accessor(field).set(self.record, locale, value)


class ScalarFieldOrchestrator(FieldOrchestrator):
    """Translate scalar fields with the plain-text translator."""

    kind = FieldKind.SCALAR

    def _bind(self, record: Any, schema: RecordSchema, **kwargs: Any) -> FieldIO:
        return ScalarFieldIO(record, schema)

    def _translate_value(
        self,
        value: str,
        source: str,
        target: str,
        context: Optional[str],
        glossary: Optional[Glossary],
    ) -> str:
        return self.translation_service.translate_text(
            value, source, target, context=context, glossary=glossary
        )
