"""
Translation capability table for record types.

A record type opts in with the ``@translatable`` class decorator, which
registers which fields are scalar (with a typed getter/setter per field) and
which are rich-text. Orchestrators consult this table instead of resolving
``<field>_<locale>`` methods at runtime.

Usage:
    @translatable(scalar=["title"], rich_text=["context"])
    @dataclass
    class Project:
        id: Optional[int] = None
        title_fr: Optional[str] = None
        title_en: Optional[str] = None
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import CapabilityError
from .translation import FieldDescriptor, FieldKind

Getter = Callable[[Any, str], Optional[str]]
Setter = Callable[[Any, str, str], None]

SCHEMA_ATTRIBUTE = "__translation_schema__"


@dataclass(frozen=True)
class ScalarAccessor:
    """Read/write a scalar field value for one locale."""

    get: Getter
    set: Setter


def suffixed_attributes(field: str) -> ScalarAccessor:
    """Accessor for per-locale attributes named ``<field>_<locale>``."""

    def _get(record: Any, locale: str) -> Optional[str]:
        return getattr(record, f"{field}_{locale}", None)

    def _set(record: Any, locale: str, value: str) -> None:
        setattr(record, f"{field}_{locale}", value)

    return ScalarAccessor(get=_get, set=_set)


def locale_mapping(attribute: str) -> ScalarAccessor:
    """Accessor for an attribute holding a ``{locale: value}`` dict."""

    def _get(record: Any, locale: str) -> Optional[str]:
        return (getattr(record, attribute, None) or {}).get(locale)

    def _set(record: Any, locale: str, value: str) -> None:
        values = getattr(record, attribute, None)
        if values is None:
            values = {}
            setattr(record, attribute, values)
        values[locale] = value

    return ScalarAccessor(get=_get, set=_set)


def _default_record_id(record: Any) -> Any:
    return getattr(record, "id", None)


@dataclass(frozen=True)
class RecordSchema:
    """Declared translation capabilities of one record type.

    ``None`` for a field table means the capability is absent; an empty table
    means the capability is declared but has no fields.
    """

    record_type: str
    scalar_fields: Optional[Mapping[str, ScalarAccessor]] = None
    rich_text_fields: Optional[Tuple[str, ...]] = None
    record_id: Callable[[Any], Any] = _default_record_id
    is_persisted: Optional[Callable[[Any], bool]] = None

    @property
    def supports_scalar(self) -> bool:
        return self.scalar_fields is not None

    @property
    def supports_rich_text(self) -> bool:
        return self.rich_text_fields is not None

    def declares_scalar(self, name: str) -> bool:
        return self.scalar_fields is not None and str(name) in self.scalar_fields

    def declares_rich_text(self, name: str) -> bool:
        return self.rich_text_fields is not None and str(name) in self.rich_text_fields

    def scalar_accessor(self, name: str) -> ScalarAccessor:
        if not self.declares_scalar(name):
            raise KeyError(name)
        return self.scalar_fields[str(name)]  # type: ignore[index]

    def field_kind(self, name: str) -> Optional[FieldKind]:
        """Kind of a field; rich-text wins when both kinds declare it."""
        if self.declares_rich_text(name):
            return FieldKind.RICH_TEXT
        if self.declares_scalar(name):
            return FieldKind.SCALAR
        return None

    def translatable_fields(self) -> List[str]:
        """Declared scalar fields not claimed by rich-text, then rich-text fields."""
        rich = list(self.rich_text_fields or ())
        scalar = [name for name in (self.scalar_fields or {}) if name not in rich]
        return list(dict.fromkeys(scalar + rich))

    def describe(self, names: Iterable[str]) -> List[FieldDescriptor]:
        """Descriptors for the given names, silently dropping unknown fields."""
        descriptors = []
        for name in dict.fromkeys(str(n) for n in names):
            kind = self.field_kind(name)
            if kind is not None:
                descriptors.append(FieldDescriptor(name=name, kind=kind))
        return descriptors

    def owner_id(self, record: Any) -> Any:
        return self.record_id(record)

    def persisted(self, record: Any) -> bool:
        """Whether the record is already durably stored."""
        if self.is_persisted is not None:
            return bool(self.is_persisted(record))
        return self.owner_id(record) is not None


ScalarSpec = Union[Sequence[str], Mapping[str, ScalarAccessor]]


def translatable(
    *,
    scalar: Optional[ScalarSpec] = None,
    rich_text: Optional[Sequence[str]] = None,
    record_type: Optional[str] = None,
    record_id: Optional[Callable[[Any], Any]] = None,
    is_persisted: Optional[Callable[[Any], bool]] = None,
):
    """
    Class decorator registering a record type's translation capabilities.

    Args:
        scalar: Scalar field names (``<field>_<locale>`` attributes) or a
            mapping of field name to ScalarAccessor
        rich_text: Rich-text field names stored in a content store
        record_type: Owner type used as part of the content-store key
            (defaults to the class name)
        record_id: Callable returning the record's id (defaults to ``record.id``)
        is_persisted: Callable telling whether the record is already stored
            (defaults to "id is not None")
    """

    def decorator(cls):
        scalar_table: Optional[Dict[str, ScalarAccessor]] = None
        if scalar is not None:
            if isinstance(scalar, Mapping):
                scalar_table = {str(k): v for k, v in scalar.items()}
            else:
                scalar_table = {str(name): suffixed_attributes(str(name)) for name in scalar}
        schema = RecordSchema(
            record_type=record_type or cls.__name__,
            scalar_fields=scalar_table,
            rich_text_fields=tuple(str(n) for n in rich_text) if rich_text is not None else None,
            record_id=record_id or _default_record_id,
            is_persisted=is_persisted,
        )
        setattr(cls, SCHEMA_ATTRIBUTE, schema)
        return cls

    return decorator


def schema_for(record: Any) -> Optional[RecordSchema]:
    """Schema registered on the record's type, if any."""
    return getattr(type(record), SCHEMA_ATTRIBUTE, None)


def require_capability(record: Any, kind: FieldKind) -> RecordSchema:
    """
    Return the record's schema, checking it declares the given capability.

    Raises:
        CapabilityError: If the record type lacks the capability
    """
    schema = schema_for(record)
    type_name = type(record).__name__
    if kind == FieldKind.SCALAR:
        if schema is None or not schema.supports_scalar:
            raise CapabilityError(f"{type_name} does not declare scalar translatable fields")
    elif schema is None or not schema.supports_rich_text:
        raise CapabilityError(f"{type_name} does not declare rich-text translatable fields")
    return schema
