"""Field and record translation orchestrators."""

from .base import FieldOrchestrator
from .record import RecordOrchestrator, translate_record
from .rich_text import RichTextFieldOrchestrator
from .scalar import ScalarFieldOrchestrator

__all__ = [
    "FieldOrchestrator",
    "RecordOrchestrator",
    "RichTextFieldOrchestrator",
    "ScalarFieldOrchestrator",
    "translate_record",
]
