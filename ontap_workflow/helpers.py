"""Value helpers shared by the ONTAP workflow nodes.

Size strings, filter expressions and request-body cleanup. Pure
functions; nothing here performs I/O.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import FormatError

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

_SIZE_MULTIPLIERS = {unit: 1024**power for power, unit in enumerate(SIZE_UNITS)}

_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB|GB|TB|PB)?$", re.IGNORECASE)


def parse_size(size: str) -> int:
    """Convert a human-readable size to bytes.

    Units are base 1024 and case-insensitive; a bare number is bytes.

    Example:
        >>> parse_size("100GB")
        107374182400

    Raises:
        FormatError: If ``size`` is not ``<number>[B|KB|MB|GB|TB|PB]``.
    """
    match = _SIZE_PATTERN.match(size.strip()) if isinstance(size, str) else None
    if not match:
        raise FormatError(
            f'Invalid size format: {size}. Use format like "100GB" or "1TB"'
        )

    number, unit = match.groups()
    multiplier = _SIZE_MULTIPLIERS[(unit or "B").upper()]
    if "." not in number:
        return int(number) * multiplier
    return math.floor(float(number) * multiplier)


def format_bytes(num_bytes: float) -> str:
    """Format a byte count for display, e.g. ``"1.5 GB"``.

    Rounds to two decimals, so the result does not parse back to the
    exact input.

    Raises:
        FormatError: If ``num_bytes`` is negative or not finite.
    """
    if not math.isfinite(num_bytes):
        raise FormatError(f"Byte count must be finite: {num_bytes}")
    if num_bytes < 0:
        raise FormatError(f"Byte count cannot be negative: {num_bytes}")
    if num_bytes == 0:
        return "0 B"

    index = int(math.floor(math.log(num_bytes, 1024))) if num_bytes >= 1 else 0
    index = min(index, len(SIZE_UNITS) - 1)
    value = num_bytes / 1024**index
    # math.log can land just below an exact power of 1024
    if value >= 1024 and index < len(SIZE_UNITS) - 1:
        index += 1
        value /= 1024

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[index]}"


def parse_api_filters(filter_string: str | None) -> dict[str, str]:
    """Parse an ONTAP filter string into query parameters.

    Format: ``"field1=value1,field2=!value2,size=>1073741824"``. Only the
    first ``=`` of each clause separates field from value, so ONTAP query
    operators (``!``, ``<``, ``>``, ``*``, ``|``) stay in the value.
    Clauses without ``=`` are skipped.
    """
    query: dict[str, str] = {}
    if not filter_string or not filter_string.strip():
        return query

    for clause in filter_string.split(","):
        field, sep, value = clause.strip().partition("=")
        if not sep:
            continue
        field = field.strip()
        if field:
            query[field] = value.strip()
    return query


def clean_object(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Remove None and empty-string values from a request body.

    Nested mappings are cleaned recursively and dropped once empty. Lists
    are kept as they are.
    """
    cleaned: dict[str, Any] = {}
    for key, value in obj.items():
        if value is None or value == "":
            continue
        if isinstance(value, Mapping):
            nested = clean_object(value)
            if nested:
                cleaned[key] = nested
        else:
            cleaned[key] = value
    return cleaned


def build_fields_query(fields: Iterable[str] | None = None) -> dict[str, str]:
    """Build the ``fields`` query parameter from a list of field names."""
    fields = [f for f in fields or () if f]
    if not fields:
        return {}
    return {"fields": ",".join(fields)}
