"""Normalization of ONTAP failures into a single human-readable message.

ONTAP reports errors in several shapes: a structured ``error`` object in
the response body, a list of such objects, a bare HTTP status, or a
transport failure with no response at all. :func:`parse_ontap_error`
collapses all of them into the one string surfaced to the user.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

import httpx

from .exceptions import ApiError

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while communicating with ONTAP"

HTTP_STATUS_MESSAGES: Mapping[int, str] = MappingProxyType(
    {
        400: "Bad request - Invalid parameters provided",
        401: "Authentication failed - Invalid username or password",
        403: "Access denied - Insufficient permissions",
        404: "Resource not found",
        409: "Conflict - Resource already exists or operation conflicts with current state",
        500: "ONTAP internal server error",
        503: "ONTAP service temporarily unavailable",
    }
)

ONTAP_ERROR_CODES: Mapping[str, str] = MappingProxyType(
    {
        "4": "Invalid input parameters",
        "65536": "Resource not found",
        "917927": "Volume not found or does not exist",
        "1376259": "Aggregate not found",
        "2621462": "SVM not found or not configured",
        "6619139": "LUN not found",
        "13303850": "Snapshot policy not found",
        "262179": "Permission denied - check credentials",
        "1254269": "Network interface not found",
        "2621706": "Export policy not found",
    }
)


def _response_error(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, Mapping):
        return body.get("error")
    return None


def error_details(raw: Any) -> dict[str, Any]:
    """Convert an exception or error payload into the mapping shape.

    The result has any of the keys ``statusCode``, ``error``, ``code`` and
    ``message``. Mappings are returned as a shallow copy.
    """
    if isinstance(raw, Mapping):
        return dict(raw)

    if isinstance(raw, httpx.HTTPStatusError):
        details: dict[str, Any] = {
            "statusCode": raw.response.status_code,
            "message": str(raw),
        }
        nested = _response_error(raw.response)
        if nested is not None:
            details["error"] = nested
            if isinstance(nested, Mapping) and nested.get("code") is not None:
                details["code"] = nested["code"]
        return details

    if isinstance(raw, ApiError):
        details = {"message": raw.message}
        if raw.status_code is not None:
            details["statusCode"] = raw.status_code
        if raw.code is not None:
            details["code"] = raw.code
        return details

    if isinstance(raw, BaseException):
        return {"message": str(raw) or type(raw).__name__}

    if isinstance(raw, str):
        return {"message": raw}

    return {}


def _join_messages(errors: Sequence[Any]) -> str:
    messages = []
    for entry in errors:
        message = entry.get("message") if isinstance(entry, Mapping) else None
        messages.append(str(message) if message else "Unknown error")
    return "; ".join(messages)


def parse_ontap_error(raw: Any) -> str:
    """Parse an ONTAP error into a user-friendly message.

    Rules, first match wins:

    1. nested ``error.message``, with `` (Error code: <code>)`` appended
       when the nested error carries a code;
    2. nested ``error`` list, messages joined with ``"; "``;
    3. known HTTP ``statusCode``;
    4. known ONTAP vendor ``code``;
    5. plain ``message``;
    6. a fixed fallback.

    Args:
        raw: An error payload mapping or an exception.

    Returns:
        The normalized message. This function never raises.
    """
    err = error_details(raw)

    nested = err.get("error")
    if isinstance(nested, Mapping) and nested.get("message"):
        code = nested.get("code")
        suffix = f" (Error code: {code})" if code not in (None, "") else ""
        return f"{nested['message']}{suffix}"
    if nested and isinstance(nested, Sequence) and not isinstance(nested, (str, bytes)):
        return _join_messages(nested)

    status_code = err.get("statusCode")
    if isinstance(status_code, int) and status_code in HTTP_STATUS_MESSAGES:
        return HTTP_STATUS_MESSAGES[status_code]

    code = err.get("code")
    if code is not None and str(code) in ONTAP_ERROR_CODES:
        return ONTAP_ERROR_CODES[str(code)]

    message = err.get("message")
    if message:
        return str(message)

    return UNKNOWN_ERROR_MESSAGE
