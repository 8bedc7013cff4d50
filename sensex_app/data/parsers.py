"""
Upstream field parsers for converting raw futures records to tick fields.

The upstream schema is not stable: prices arrive under several names, as
numbers or numeric strings, expiries arrive in a handful of date formats,
and the record collection itself has been observed as a list, a single
object, and a mapping of expiry to list. These helpers absorb that drift.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Optional

from ..errors import MalformedDataError, MissingDataError

logger = logging.getLogger(__name__)

EXPIRY_FORMAT = "%d-%m-%Y"
TIME_LABEL_FORMAT = "%H:%M:%S"

# Tried in order; day-first wins over month-first for ambiguous dates
_EXPIRY_INPUT_FORMATS = (
    "%d-%m-%Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d%b%Y",
    "%d-%B-%Y",
    "%d %B %Y",
    "%Y%m%d",
)

# Epoch values above this are milliseconds
_EPOCH_MS_THRESHOLD = 1e11


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def _epoch_to_datetime(value: float) -> datetime:
    if value > _EPOCH_MS_THRESHOLD:
        value = value / 1000.0
    return datetime.fromtimestamp(value)


def normalize_expiry(raw: Any) -> str:
    """
    Normalize an upstream expiry value to the canonical ``DD-MM-YYYY`` key.

    Accepts date strings in the formats listed in ``_EXPIRY_INPUT_FORMATS``,
    ISO timestamps (only the date part is kept, as written), ``date`` /
    ``datetime`` objects, and epoch seconds or milliseconds. A canonical
    key normalizes to itself.

    Raises:
        MissingDataError: if ``raw`` is empty
        MalformedDataError: if ``raw`` cannot be read as a date
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MissingDataError("Expiry value is empty", data_type="expiry")

    if isinstance(raw, datetime):
        return raw.strftime(EXPIRY_FORMAT)
    if isinstance(raw, date):
        return raw.strftime(EXPIRY_FORMAT)

    if isinstance(raw, bool):
        raise MalformedDataError("Expiry cannot be a boolean", raw_data=str(raw))

    if isinstance(raw, (int, float)):
        try:
            return _epoch_to_datetime(float(raw)).strftime(EXPIRY_FORMAT)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedDataError(
                f"Expiry epoch out of range: {raw}", raw_data=str(raw)
            ) from e

    if not isinstance(raw, str):
        raise MalformedDataError(
            f"Unsupported expiry type {type(raw).__name__}", raw_data=str(raw)[:100]
        )

    text = raw.strip()

    # ISO timestamps: keep the calendar date as written
    if len(text) > 10 and text[10] in ("T", " ") and text[4] == "-":
        text = text[:10]

    # Long digit runs are epochs, 8 digits is YYYYMMDD
    if text.isdigit() and len(text) >= 10:
        return normalize_expiry(int(text))

    for fmt in _EXPIRY_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime(EXPIRY_FORMAT)
        except ValueError:
            continue

    raise MalformedDataError(
        f"Unrecognized expiry format: {raw!r}",
        raw_data=raw[:100],
        expected_format="date string, ISO timestamp or epoch"
    )


def parse_price(record: dict[str, Any], fields: Iterable[str]) -> float:
    """
    Extract a price from the first present and numeric field.

    Raises:
        MissingDataError: if none of ``fields`` holds a usable number
    """
    fields = tuple(fields)
    for name in fields:
        if name not in record:
            continue
        number = parse_number(record[name])
        if number is not None:
            return number
        logger.debug(f"Skipping non-numeric price field {name}={record[name]!r}")

    raise MissingDataError(
        f"No usable price in fields {list(fields)}",
        data_type="price",
        context={"available_fields": sorted(record.keys())}
    )


def parse_optional_price(record: dict[str, Any], fields: Iterable[str],
                         default: float = 0.0) -> float:
    """Like ``parse_price`` but returns ``default`` when nothing is usable."""
    for name in fields:
        if name in record:
            number = parse_number(record[name])
            if number is not None:
                return number
    return default


def format_time_label(moment: datetime) -> str:
    """Format a wall-clock moment as a 24-hour label without timezone."""
    return moment.strftime(TIME_LABEL_FORMAT)


def parse_time_label(record: dict[str, Any], fields: Iterable[str], now: datetime) -> str:
    """
    Return the record's time label, falling back to ``now``.

    String values are used as given (stripped). Numeric values are treated
    as epoch seconds or milliseconds and rendered in local time.
    """
    for name in fields:
        value = record.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return format_time_label(_epoch_to_datetime(float(value)))
            except (OverflowError, OSError, ValueError):
                logger.debug(f"Ignoring out-of-range epoch {name}={value!r}")
                continue

    return format_time_label(now)


def find_first(record: dict[str, Any], fields: Iterable[str]) -> Optional[Any]:
    """Return the first non-empty value among ``fields``."""
    for name in fields:
        value = record.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def extract_records(payload: Any, records_field: str,
                    expiry_fields: Iterable[str] = ("expiry_date",)) -> list[dict[str, Any]]:
    """
    Pull the record collection out of an upstream response body.

    Supported shapes for ``payload[records_field]``:
    - a list of record objects
    - a single record object
    - a mapping of expiry to a list of record objects; the key is copied
      into the first of ``expiry_fields`` for records carrying none of them

    Returns an empty list when the field is absent or empty.

    Raises:
        MalformedDataError: if the body is not an object or the field has
            an unsupported type
    """
    if not isinstance(payload, dict):
        raise MalformedDataError(
            "Upstream payload must be a JSON object",
            raw_data=str(payload)[:100],
            expected_format="object"
        )

    collection = payload.get(records_field)
    if not collection:
        return []

    if isinstance(collection, list):
        records = [item for item in collection if isinstance(item, dict)]
        if len(records) != len(collection):
            logger.warning(
                f"Dropped {len(collection) - len(records)} non-object entries from {records_field}"
            )
        return records

    if isinstance(collection, dict):
        expiry_fields = tuple(expiry_fields)
        if all(isinstance(value, list) for value in collection.values()):
            records = []
            for expiry_key, group in collection.items():
                for item in group:
                    if not isinstance(item, dict):
                        continue
                    if find_first(item, expiry_fields) is None:
                        item = {**item, expiry_fields[0]: expiry_key}
                    records.append(item)
            return records
        return [collection]

    raise MalformedDataError(
        f"Unsupported {records_field} type {type(collection).__name__}",
        raw_data=str(collection)[:100],
        expected_format="list or object"
    )
