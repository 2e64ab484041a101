"""
Ingestion of access-log exports into access records.

Two formats are understood, selected by file extension:

- ``.csv``: a header row naming at least ``@timestamp``, ``path``, ``params``
  and ``target_processing_time``, optionally ``domain_name``.
- ``.json``: concatenated ``{"_source": {...}}`` objects, one per record,
  separated by arbitrary whitespace.
"""

import json
import logging
import math
import os
import re
from operator import attrgetter
from typing import Any, Dict, List

import pandas as pd

from repeater.common.timestamps import parse_timestamp
from repeater.configuration import (
    CSV_EXTENSION,
    CSV_REQUIRED_COLUMNS,
    FIELD_DOMAIN_NAME,
    FIELD_PARAMETERS,
    FIELD_PATH,
    FIELD_REQUIRED_TIME,
    FIELD_TIMESTAMP,
    JSON_EXTENSION,
    JSON_SOURCE_KEY,
)
from repeater.errors import (
    BadTimestampError,
    IoFailureError,
    RecordDecodeError,
    UnsupportedInputError,
)
from repeater.persistence.record import AccessRecord

logger = logging.getLogger(__name__)

_JSON_WHITESPACE = re.compile(r"[ \t\n\r]*")


def read_records(path: str) -> List[AccessRecord]:
    """Read all records from a CSV or JSON export, sorted by timestamp.

    Ties keep their file order.

    Args:
        path: Path of the export file

    Returns:
        List of access records, possibly empty

    Raises:
        UnsupportedInputError: If the extension is missing or unknown
        IoFailureError: If the file cannot be read
        RecordDecodeError: If any row or object is malformed
    """
    extension = os.path.splitext(str(path))[1]
    if extension == CSV_EXTENSION:
        records = _read_csv_records(path)
    elif extension == JSON_EXTENSION:
        records = _read_json_records(path)
    elif extension:
        raise UnsupportedInputError(f"Unknown file extension: {extension.lstrip('.')}")
    else:
        raise UnsupportedInputError(f"Can't determine file-type of {path}")

    records.sort(key=attrgetter("timestamp"))
    logger.info(f"Read {len(records)} records from {path}")
    return records


def _read_csv_records(path: str) -> List[AccessRecord]:
    try:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return []
    except OSError as e:
        raise IoFailureError(f"Cannot read {path}: {e}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise RecordDecodeError(f"Malformed CSV in {path}: {e}") from e

    missing = [column for column in CSV_REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise RecordDecodeError(f"CSV header of {path} is missing columns: {', '.join(missing)}")

    return [
        record_from_fields(row, f"row {index}")
        for index, row in enumerate(frame.to_dict(orient="records"), start=1)
    ]


def _read_json_records(path: str) -> List[AccessRecord]:
    try:
        with open(path, encoding="utf-8") as handle:
            content = handle.read()
    except OSError as e:
        raise IoFailureError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise RecordDecodeError(f"{path} is not valid UTF-8: {e}") from e

    decoder = json.JSONDecoder()
    records = []
    position = _JSON_WHITESPACE.match(content, 0).end()
    index = 0
    while position < len(content):
        index += 1
        try:
            document, position = decoder.raw_decode(content, position)
        except json.JSONDecodeError as e:
            raise RecordDecodeError(
                f"object {index}: {e.msg} at line {e.lineno} column {e.colno}"
            ) from e

        source = document.get(JSON_SOURCE_KEY) if isinstance(document, dict) else None
        if not isinstance(source, dict):
            raise RecordDecodeError(f"object {index}: expected an object with a '{JSON_SOURCE_KEY}' object")
        records.append(record_from_fields(source, f"object {index}"))

        position = _JSON_WHITESPACE.match(content, position).end()

    return records


def record_from_fields(fields: Dict[str, Any], location: str) -> AccessRecord:
    """Build an access record from a row or ``_source`` mapping.

    Args:
        fields: Field name to raw value
        location: Human-readable position used in error messages

    Raises:
        RecordDecodeError: If a required field is missing or malformed
    """
    try:
        timestamp = parse_timestamp(_required_str(fields, FIELD_TIMESTAMP, location))
    except BadTimestampError as e:
        raise BadTimestampError(f"{location}: {e}") from e

    return AccessRecord(
        timestamp=timestamp,
        domain_name=_optional_str(fields, FIELD_DOMAIN_NAME, location) or None,
        path=_required_str(fields, FIELD_PATH, location),
        parameters=_optional_str(fields, FIELD_PARAMETERS, location),
        required_time=_required_seconds(fields, FIELD_REQUIRED_TIME, location),
    )


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _required_str(fields: Dict[str, Any], name: str, location: str) -> str:
    value = fields.get(name)
    if _is_missing(value):
        raise RecordDecodeError(f"{location}: missing field '{name}'")
    if not isinstance(value, str):
        raise RecordDecodeError(f"{location}: field '{name}' must be a string, got {value!r}")
    return value


def _optional_str(fields: Dict[str, Any], name: str, location: str) -> str:
    value = fields.get(name)
    if _is_missing(value):
        return ""
    if not isinstance(value, str):
        raise RecordDecodeError(f"{location}: field '{name}' must be a string, got {value!r}")
    return value


def _required_seconds(fields: Dict[str, Any], name: str, location: str) -> float:
    value = fields.get(name)
    if _is_missing(value) or value == "":
        raise RecordDecodeError(f"{location}: missing field '{name}'")
    if isinstance(value, bool):
        raise RecordDecodeError(f"{location}: field '{name}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise RecordDecodeError(f"{location}: field '{name}' must be a number, got {value!r}") from e
