"""
Log record to row mapping.
"""
import json
from collections.abc import Mapping
from typing import Any

from logsink.exceptions import SerializationError
from logsink.options import FieldMapping

__all__ = ['split_record', 'map_record']

RESERVED_KEYS = ('level', 'message')


def split_record(record: Mapping[str, Any]) -> tuple[Any, Any, dict[str, Any]]:
    """Split a record into its level, message and metadata remainder.

    Missing level or message come back as None.
    """
    meta = {k: v for k, v in record.items() if k not in RESERVED_KEYS}
    return record.get('level'), record.get('message'), meta


def map_record(record: Mapping[str, Any], fields: FieldMapping) -> dict[str, Any]:
    """Map a log record to `{column: value}` through the field mapping.

    Insertion order is meta, level, message and drives the column order of
    the generated insert.

    Raises
        SerializationError: If the metadata cannot be encoded as JSON
    """
    if not isinstance(record, Mapping):
        raise SerializationError(f'Log record must be a mapping, got {type(record).__name__}')

    level, message, meta = split_record(record)
    try:
        meta_json = json.dumps(meta, default=str)
    except (TypeError, ValueError, RecursionError) as err:
        raise SerializationError(f'Unable to serialize log metadata: {err}') from err

    row = {}
    row[fields.meta] = meta_json
    row[fields.level] = level
    row[fields.message] = message
    return row
