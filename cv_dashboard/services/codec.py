"""
Conversion between stored profile rows and `ProfileRecord`.

The store keeps `skills`, `experience` and `education` either as JSON text or as
native arrays depending on how the row was written. Every raw value is resolved
once into a tagged union (`MissingField | EncodedField | StructuredField`) and
decoded from there, so nothing downstream ever sees the encoded form.
"""

import json
from typing import Any, Iterable, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as ShapeError

from cv_dashboard.core.errors import ValidationError
from cv_dashboard.models.profile import EducationEntry, ExperienceEntry, ProfileRecord

LIST_FIELDS = ("skills", "experience", "education")
REQUIRED_FIELDS = ("skills", "experience", "education", "file_url")

# One adapter per list entry; a bad entry is skipped without emptying the field
_ENTRY_ADAPTERS: dict[str, TypeAdapter] = {
    "skills": TypeAdapter(str, config=ConfigDict(coerce_numbers_to_str=True)),
    "experience": TypeAdapter(ExperienceEntry),
    "education": TypeAdapter(EducationEntry),
}


class MissingField(BaseModel):
    kind: Literal["missing"] = "missing"


class EncodedField(BaseModel):
    kind: Literal["encoded"] = "encoded"
    text: str


class StructuredField(BaseModel):
    kind: Literal["structured"] = "structured"
    items: list[Any]


class UnsupportedField(BaseModel):
    kind: Literal["unsupported"] = "unsupported"
    type_name: str


RawField = MissingField | EncodedField | StructuredField | UnsupportedField


def classify(value: Any) -> RawField:
    if value is None:
        return MissingField()
    if isinstance(value, str):
        return EncodedField(text=value)
    if isinstance(value, list):
        return StructuredField(items=value)
    return UnsupportedField(type_name=type(value).__name__)


def _decode_field(name: str, value: Any, record_id: Any) -> list:
    """Decode one list field. Unparsable fields become [], odd entries are skipped; both are logged, never raised."""
    raw = classify(value)

    if isinstance(raw, MissingField):
        return []
    if isinstance(raw, UnsupportedField):
        logger.warning(f"Unexpected {raw.type_name} in field '{name}' for profile {record_id}; using []")
        return []

    if isinstance(raw, EncodedField):
        try:
            items = json.loads(raw.text)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed JSON in field '{name}' for profile {record_id}: {e}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Field '{name}' for profile {record_id} is not a JSON array; using []")
            return []
    else:
        items = raw.items

    adapter = _ENTRY_ADAPTERS[name]
    entries = []
    for index, item in enumerate(items):
        try:
            entries.append(adapter.validate_python(item))
        except ShapeError as e:
            logger.warning(
                f"Skipping entry {index} of field '{name}' for profile {record_id}: {e.error_count()} error(s)"
            )
    return entries


def decode(row: dict[str, Any]) -> ProfileRecord:
    """Turn a raw store row into a `ProfileRecord` with structured list fields."""
    record_id = row.get("id")
    data = dict(row)
    for name in LIST_FIELDS:
        data[name] = _decode_field(name, row.get(name), record_id)
    return ProfileRecord.model_validate(data)


def decode_many(rows: Iterable[dict[str, Any]] | None) -> list[ProfileRecord]:
    return [decode(row) for row in rows or []]


def encode_field(items: list) -> str:
    """JSON text form of a decoded list field, keeping only the keys the source carried."""
    plain = [item.model_dump(exclude_unset=True) if isinstance(item, BaseModel) else item for item in items]
    return json.dumps(plain)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def encode_for_insert(payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a create payload and return the row to insert.

    The store accepts both encodings of the list fields, so values are passed through as-is.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_missing(payload.get(name))]
    if missing:
        raise ValidationError("Skills, experience, education, and file_url are required")
    return dict(payload)
