"""Validation of mapped entries against the content type schema."""

from typing import Iterable, List

from .models import ContentTypeSchema, MappedEntry
from .utils.exceptions import EntryValidationError


def find_missing_fields(entry: MappedEntry, schema: ContentTypeSchema) -> List[str]:
    """Required schema fields the entry does not have, in schema order."""
    return [field_id for field_id in schema.required_field_ids if field_id not in entry.fields]


def find_invalid_fields(entry: MappedEntry, schema: ContentTypeSchema) -> List[str]:
    """Entry fields the schema does not know, in entry order."""
    known = set(schema.field_ids)
    return [field_id for field_id in entry.fields if field_id not in known]


def validate_entry(entry: MappedEntry, schema: ContentTypeSchema) -> None:
    """Check an entry's field set against the schema.

    Both checks run over every field before anything is reported.

    Raises:
        EntryValidationError: If a required field is missing or a field is unknown
    """
    missing = find_missing_fields(entry, schema)
    invalid = find_invalid_fields(entry, schema)
    if not missing and not invalid:
        return

    problems = [f'missing field "{field_id}"' for field_id in missing]
    problems += [f'invalid field "{field_id}"' for field_id in invalid]

    raise EntryValidationError(
        "validation against content type failed - " + ", ".join(problems),
        file_path=entry.path,
        missing_fields=missing,
        invalid_fields=invalid,
    )


def validate_entries(entries: Iterable[MappedEntry], schema: ContentTypeSchema) -> None:
    """Validate entries in order, stopping at the first invalid one."""
    for entry in entries:
        validate_entry(entry, schema)
