"""NetApp ONTAP REST API client with Basic Authentication.

This module provides the async request layer shared by every ONTAP
workflow node: authenticated requests, HAL-link pagination, polling of
asynchronous jobs and resolution of job-bearing responses.

Example:
    >>> target = OntapTarget(host="cluster1.example.com", username="admin", password="secret")
    >>> client = OntapAPIClient(target)
    >>> volumes = await client.request_all_items("GET", "/storage/volumes")
    >>> response = await client.request("POST", "/storage/volumes", body={"name": "vol1"})
    >>> result = await client.handle_async_response(response)
    >>> print(result["_jobCompleted"])

Note:
    The client keeps no connection between calls. Every request opens a
    fresh HTTP connection against the target and closes it afterwards,
    so a client can be built per work item without leaking sessions.

    ONTAP API URL structure:
    - Resources: https://{host}:{port}/api/{collection}[/{uuid}]
    - Jobs: https://{host}:{port}/api/cluster/jobs/{uuid}
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from .config import (
    DEFAULT_JOB_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_MS,
    Config,
    OntapTarget,
)
from .errors import error_details, parse_ontap_error
from .exceptions import ApiError, ConfigurationError, JobFailedError, JobTimeoutError
from .logging_config import LoggerAdapter, get_logger
from .models import JOB_FAILURE, JOB_SUCCESS, PENDING_JOB_STATES, OntapApiResponse

logger = get_logger(__name__)

API_PREFIX = "/api"

ALLOWED_METHODS = frozenset({"GET", "POST", "PATCH", "DELETE"})

# ONTAP rejects a body on these, so none is sent
BODYLESS_METHODS = frozenset({"GET", "DELETE"})

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/hal+json",
}

DEFAULT_MAX_RECORDS = 1000


class OntapAPIClient:
    """ONTAP API client using HTTP Basic Authentication.

    Attributes:
        target: Connection target (host, port, credentials, TLS flag).
        base_url: ``https://{host}:{port}``, without the ``/api`` prefix.
        max_pages: Optional cap on pages followed by :meth:`request_all_items`.
    """

    def __init__(
        self,
        target: OntapTarget,
        timeout: float = 30,
        max_pages: int | None = None,
        job_timeout_ms: int = DEFAULT_JOB_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the ONTAP API client.

        Args:
            target: Cluster to talk to.
            timeout: Request timeout in seconds.
            max_pages: Stop pagination with an error after this many pages.
                None follows ``next`` links for as long as the cluster
                returns them.
            job_timeout_ms: Default time to wait for an async job.
            poll_interval_ms: Default delay between job status polls.
            transport: Optional httpx transport, used by tests.
        """
        self.target = target
        self.base_url = target.base_url
        self.timeout = timeout
        self.max_pages = max_pages
        self.job_timeout_ms = job_timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._transport = transport
        self._logger = LoggerAdapter(logger, {"host": target.host})

    @classmethod
    def from_config(
        cls,
        config: Config,
        target: OntapTarget | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OntapAPIClient":
        """Build a client from loaded configuration.

        Args:
            config: Loaded configuration.
            target: Target to use instead of the configured one.
            transport: Optional httpx transport.

        Raises:
            ConfigurationError: If no target is given or configured.
        """
        target = target or config.target
        if target is None:
            raise ConfigurationError("No ONTAP target configured (set ONTAP_HOST)")
        return cls(
            target,
            timeout=config.client.request_timeout / 1000,
            max_pages=config.client.max_pages,
            job_timeout_ms=config.client.job_timeout,
            poll_interval_ms=config.client.poll_interval,
            transport=transport,
        )

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            auth=httpx.BasicAuth(self.target.username, self.target.password),
            verify=not self.target.allow_insecure_tls,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        uri: str | None = None,
    ) -> dict[str, Any]:
        """Make one authenticated request to the ONTAP REST API.

        There are no retries: a failed attempt is final.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: Endpoint path below ``/api`` (e.g. "/storage/volumes").
            body: JSON body; ignored for GET and DELETE.
            query: Query parameters; omitted when empty.
            uri: Absolute URL used verbatim instead of ``path``.

        Returns:
            Parsed JSON response.

        Raises:
            ApiError: On transport failure, TLS failure, malformed URL or
                non-2xx status.
            ValueError: If the method is not supported.
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = uri or f"{self.base_url}{API_PREFIX}{path}"
        kwargs: dict[str, Any] = {"headers": DEFAULT_HEADERS}
        if query:
            kwargs["params"] = dict(query)
        if method not in BODYLESS_METHODS:
            kwargs["json"] = dict(body or {})

        self._logger.debug(
            f"Executing {method} {url}",
            extra={"params": kwargs.get("params"), "has_body": "json" in kwargs},
        )

        try:
            async with self._http_client() as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            details = error_details(e)
            message = parse_ontap_error(details)
            self._logger.warning(
                f"{method} {url} failed: {message}",
                extra={"status_code": e.response.status_code},
            )
            code = details.get("code")
            raise ApiError(
                message,
                status_code=e.response.status_code,
                code=str(code) if code is not None else None,
                details={"method": method, "url": url},
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = parse_ontap_error(e)
            self._logger.warning(f"{method} {url} failed: {message}")
            raise ApiError(message, details={"method": method, "url": url}) from e

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> dict[str, Any]:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            self._logger.warning(
                f"Response is not JSON: {e}",
                extra={"content_type": response.headers.get("content-type")},
            )
            return {"raw_response": response.text}
        if not isinstance(data, dict):
            return {"records": data} if isinstance(data, list) else {"value": data}
        return data

    async def request_all_items(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        property_name: str = "records",
    ) -> list[Any]:
        """Fetch every record of a collection by following ``next`` links.

        The first page is requested with ``query``; each following page
        uses the server's ``_links.next.href`` verbatim, which already
        carries the cursor. ``max_records`` defaults to 1000 per page.

        Args:
            method: HTTP method, usually GET.
            path: Collection path (e.g. "/storage/volumes").
            body: Optional request body.
            query: Query parameters for the first page.
            property_name: Key holding the records in each page.

        Returns:
            All records, in the order the pages returned them.

        Raises:
            ApiError: If any page fails; no partial result is returned.
        """
        query = dict(query or {})
        if not query.get("max_records"):
            query["max_records"] = DEFAULT_MAX_RECORDS

        records: list[Any] = []
        next_link: str | None = None
        pages = 0

        while True:
            if next_link:
                page = await self.request(
                    method, "", body, uri=f"{self.base_url}{next_link}"
                )
            else:
                page = await self.request(method, path, body, query)
            pages += 1

            records.extend(page.get(property_name) or [])

            try:
                next_link = OntapApiResponse.model_validate(page).next_href
            except ValidationError as e:
                raise ApiError(f"Malformed ONTAP pagination response: {e}") from e

            if not next_link:
                break
            if self.max_pages is not None and pages >= self.max_pages:
                raise ApiError(
                    f"Pagination exceeded {self.max_pages} pages for {path}",
                    details={"path": path, "records": len(records)},
                )

        self._logger.debug(
            f"Fetched {len(records)} records from {path}",
            extra={"pages": pages},
        )
        return records

    async def get_many(
        self,
        path: str,
        query: Mapping[str, Any] | None = None,
        return_all: bool = True,
        limit: int = 50,
    ) -> list[Any]:
        """List a collection, either entirely or up to ``limit`` records."""
        if return_all:
            return await self.request_all_items("GET", path, query=query)
        query = {**(query or {}), "max_records": limit or 50}
        response = await self.request("GET", path, query=query)
        return response.get("records") or []

    async def wait_for_job(
        self,
        job_uuid: str,
        timeout_ms: int | None = None,
        poll_interval_ms: int | None = None,
    ) -> dict[str, Any]:
        """Poll an ONTAP job until it succeeds, fails or times out.

        The timeout is checked before each poll, so the total wait can
        exceed ``timeout_ms`` by up to one poll interval.

        Args:
            job_uuid: UUID of the job to watch.
            timeout_ms: Give up after this long (client default: 5 minutes).
            poll_interval_ms: Delay between polls (client default: 2 seconds).

        Returns:
            The job payload once it reports ``success``.

        Raises:
            JobFailedError: If the job reports ``failure``.
            JobTimeoutError: If no terminal state is reached in time.
            ApiError: If the job reports an unknown state or a poll fails.
        """
        if timeout_ms is None:
            timeout_ms = self.job_timeout_ms
        if poll_interval_ms is None:
            poll_interval_ms = self.poll_interval_ms

        start = time.monotonic()
        polls = 0

        while (time.monotonic() - start) * 1000 < timeout_ms:
            job = await self.request("GET", f"/cluster/jobs/{job_uuid}")
            polls += 1
            state = job.get("state")

            if state == JOB_SUCCESS:
                self._logger.info(
                    f"Job {job_uuid} completed", extra={"polls": polls}
                )
                return job

            if state == JOB_FAILURE:
                reason = job.get("message") or "Job failed without error message"
                raise JobFailedError(f"ONTAP job failed: {reason}", job=job)

            if state in PENDING_JOB_STATES:
                self._logger.debug(f"Job {job_uuid} is {state}, waiting")
                await asyncio.sleep(poll_interval_ms / 1000)
                continue

            raise ApiError(
                f"Unknown job state: {state}",
                details={"job_uuid": job_uuid, "state": state},
            )

        raise JobTimeoutError(job_uuid, timeout_ms)

    async def handle_async_response(
        self,
        response: dict[str, Any],
        wait_for_completion: bool = True,
    ) -> dict[str, Any]:
        """Resolve a mutating call's response that may reference a job.

        Without a job reference the response is returned unchanged.
        Otherwise a copy is returned with ``_jobCompleted`` set and, when
        waiting, ``job`` replaced by the finished job.

        Raises:
            ApiError: Whatever :meth:`wait_for_job` raises.
        """
        job = response.get("job")
        job_uuid = job.get("uuid") if isinstance(job, Mapping) else None
        if not job_uuid:
            return response

        if not wait_for_completion:
            return {**response, "_jobCompleted": False}

        completed = await self.wait_for_job(job_uuid)
        return {**response, "job": completed, "_jobCompleted": True}


async def check_connection(
    target: OntapTarget,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Test connection and credentials against an ONTAP cluster.

    Args:
        target: Cluster to test.
        transport: Optional httpx transport.

    Returns:
        Connection test result with ``success`` and ``message`` keys.

    Example:
        >>> result = await check_connection(OntapTarget(host="cluster1", username="admin", password="pw"))
        >>> print(result["success"])
    """
    client = OntapAPIClient(target, timeout=10, transport=transport)
    try:
        result = await client.request("GET", "/cluster")
    except ApiError as e:
        return {
            "success": False,
            "message": e.message,
            "host": target.host,
        }
    cluster_name = result.get("name", "Unknown")
    return {
        "success": True,
        "message": f"Connected to cluster: {cluster_name}",
        "host": target.host,
        "cluster_name": cluster_name,
        "version": (result.get("version") or {}).get("full"),
    }
