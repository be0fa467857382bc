"""JSON import/export of the filament inventory.

The file is a JSON array with one camelCase object per filament. Record ids
and timestamps are never written, and are ignored when reading: every
decoded filament is a brand-new record.
"""

import json
import logging
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from backend.app.models.filament import Filament
from backend.app.schemas.filament import TRANSFER_FIELDS, FilamentTransfer

logger = logging.getLogger(__name__)

EXPORT_MEDIA_TYPE = "application/json"

_transfer_list = TypeAdapter(list[FilamentTransfer])


class DecodeError(ValueError):
    """The payload is not a JSON array of valid filament objects."""


def to_transfer_dict(filament) -> dict:
    return {to_camel(name): getattr(filament, name) for name in TRANSFER_FIELDS}


def encode_filaments(filaments: Iterable) -> bytes:
    """Serialize filaments to the interchange format (sorted keys, indented)."""
    payload = [to_transfer_dict(filament) for filament in filaments]
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False).encode("utf-8")


def decode_filaments(data: bytes | str) -> list[Filament]:
    """Parse an interchange payload into new, unsaved ``Filament`` records.

    The whole payload must be valid; any error raises ``DecodeError`` and
    nothing is returned.
    """
    try:
        items = _transfer_list.validate_json(data)
    except ValidationError as e:
        logger.warning(f"Rejected filament import payload: {e.error_count()} error(s)")
        raise DecodeError(_describe(e)) from e

    return [Filament(**item.model_dump()) for item in items]


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "payload"
    return f"Invalid filament file at {location}: {first['msg']}"
