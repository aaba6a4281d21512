# tabular_qa/domain/fields.py

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .models import Record


def _as_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class FieldLookup:
    """
    Ordered-fallback lookup: the first non-empty value among `field_names`.

    Used uniformly for every derived value of a record (primary text,
    link, title-like fields) so the priority lists live in configuration.
    """
    field_names: Tuple[str, ...]

    @classmethod
    def of(cls, field_names: Sequence[str]) -> "FieldLookup":
        return cls(tuple(field_names))

    def first(self, record: Record) -> Optional[str]:
        for name in self.field_names:
            text = _as_text(record.get(name))
            if text:
                return text
        return None

    def values(self, record: Record) -> Tuple[str, ...]:
        """Every non-empty value among `field_names`, in priority order."""
        found = (_as_text(record.get(name)) for name in self.field_names)
        return tuple(text for text in found if text)


def primary_text(record: Record, text_fields: FieldLookup) -> str:
    """
    Text used to index a record: the first non-empty prioritized field,
    or every field value joined with spaces when none of them is set.
    """
    preferred = text_fields.first(record)
    if preferred:
        return preferred
    return " ".join(_as_text(value) for value in record.fields.values() if _as_text(value))
