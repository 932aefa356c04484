"""NetApp ONTAP workflow core - shared request layer for ONTAP workflow nodes.

This package provides the request/response layer behind the ONTAP
workflow nodes (volumes, SVMs, LUNs, SnapMirror, security, ...). Each
node maps a (resource, operation) pair onto ONTAP REST calls made
through this layer.

Features:
    - Basic auth requests against https://{host}:{port}/api
    - HAL-link pagination over whole collections
    - Polling of asynchronous ONTAP jobs until completion
    - Normalized, human-readable error messages
    - Size string and filter expression helpers

Example:
    Using as a library::

        from ontap_workflow import OntapAPIClient, OntapTarget

        target = OntapTarget(host="cluster1", username="admin", password="pw")
        client = OntapAPIClient(target)
        response = await client.request("PATCH", f"/storage/volumes/{uuid}", body={"size": size})
        result = await client.handle_async_response(response)

Attributes:
    __version__: Package version following semantic versioning.
"""

__version__ = "1.0.0"

from .api_client import OntapAPIClient, check_connection
from .config import Config, OntapTarget, load_config
from .errors import parse_ontap_error
from .exceptions import (
    ApiError,
    FormatError,
    JobFailedError,
    JobTimeoutError,
    OntapError,
    ResourceNotFoundError,
)
from .helpers import (
    build_fields_query,
    clean_object,
    format_bytes,
    parse_api_filters,
    parse_size,
)

__all__ = [
    "__version__",
    "OntapAPIClient",
    "OntapTarget",
    "Config",
    "load_config",
    "check_connection",
    "parse_ontap_error",
    "OntapError",
    "ApiError",
    "FormatError",
    "JobFailedError",
    "JobTimeoutError",
    "ResourceNotFoundError",
    "build_fields_query",
    "clean_object",
    "format_bytes",
    "parse_api_filters",
    "parse_size",
]
