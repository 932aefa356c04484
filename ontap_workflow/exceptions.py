"""Exception hierarchy for the ONTAP workflow core.

Every failure raised by this package derives from :class:`OntapError`, so
callers running items in a batch can catch one type and surface
``str(exc)`` as the per-item error message.

Example:
    >>> try:
    ...     await client.request("GET", "/storage/volumes/missing")
    ... except ApiError as e:
    ...     print(e.status_code, e.message)
"""

from __future__ import annotations

from typing import Any


class OntapError(Exception):
    """Base exception for all ONTAP workflow errors.

    Attributes:
        message: Human-readable error message.
        details: Optional structured context for logging.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ApiError(OntapError):
    """Raised when an ONTAP REST call fails.

    The message is always the normalized text produced by
    :func:`ontap_workflow.errors.parse_ontap_error`, never the raw
    transport exception.

    Attributes:
        status_code: HTTP status code, if a response was received.
        code: ONTAP vendor error code, if the response body carried one.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message, details)


class JobFailedError(ApiError):
    """Raised when an asynchronous ONTAP job ends in the ``failure`` state."""

    def __init__(self, message: str, job: dict[str, Any] | None = None) -> None:
        self.job = job or {}
        super().__init__(message, details={"job_uuid": self.job.get("uuid")})


class JobTimeoutError(ApiError):
    """Raised when a job does not reach a terminal state in time.

    The job may still be running on the cluster; this only means the
    client stopped waiting.
    """

    def __init__(self, job_uuid: str, timeout_ms: int) -> None:
        self.job_uuid = job_uuid
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Job {job_uuid} did not complete within {timeout_ms / 1000:g} seconds",
            details={"job_uuid": job_uuid, "timeout_ms": timeout_ms},
        )


class ResourceNotFoundError(ApiError):
    """Raised when a name lookup matches no ONTAP resource."""

    def __init__(self, label: str, value: str) -> None:
        self.label = label
        self.value = value
        super().__init__(
            f'{label} "{value}" not found',
            status_code=404,
            details={"label": label, "value": value},
        )


class FormatError(OntapError, ValueError):
    """Raised when user input such as a size string cannot be parsed."""


class ConfigurationError(OntapError):
    """Raised when configuration is invalid or incomplete."""


class EnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    def __init__(self, variable: str, message: str | None = None) -> None:
        self.variable = variable
        super().__init__(
            message or f"Required environment variable not set: {variable}",
            details={"variable": variable},
        )
