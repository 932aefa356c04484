"""Resource locators: address an ONTAP object by UUID or by name.

Nodes let the user pick a volume, SVM or aggregate either by its UUID or
by its name. Names are resolved with a filtered list call against the
resource's collection.

Example:
    >>> locator = ResourceLocator(mode="name", value="vol1")
    >>> uuid = await resolve_uuid(
    ...     client, "/storage/volumes", locator, "Volume", {"svm.name": "svm1"}
    ... )
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

from .api_client import OntapAPIClient
from .exceptions import ResourceNotFoundError
from .logging_config import get_logger

logger = get_logger(__name__)


class ResourceLocator(BaseModel):
    """Reference to an ONTAP object by UUID or by name."""

    mode: Literal["uuid", "name"] = "uuid"
    value: str = Field(min_length=1)

    model_config = {"extra": "ignore"}


async def resolve_uuid(
    client: OntapAPIClient,
    collection_path: str,
    locator: ResourceLocator | Mapping[str, Any],
    label: str = "Resource",
    extra_query: Mapping[str, Any] | None = None,
) -> str:
    """Resolve a locator to the UUID of an ONTAP object.

    Args:
        client: Client bound to the cluster.
        collection_path: Collection to search (e.g. "/storage/volumes").
        locator: Locator, or a ``{"mode": ..., "value": ...}`` mapping.
        label: Resource name used in the not-found message.
        extra_query: Additional filters such as ``{"svm.name": "svm1"}``.
            Empty values are ignored.

    Returns:
        The UUID. In ``uuid`` mode this is the locator value itself.

    Raises:
        ResourceNotFoundError: If no object has that name.
        ApiError: If the lookup request fails.
    """
    if not isinstance(locator, ResourceLocator):
        locator = ResourceLocator.model_validate(locator)

    if locator.mode == "uuid":
        return locator.value

    query: dict[str, Any] = {"name": locator.value}
    for key, value in (extra_query or {}).items():
        if value not in (None, ""):
            query[key] = value

    records = await client.request_all_items("GET", collection_path, query=query)
    if not records:
        raise ResourceNotFoundError(label, locator.value)

    uuid = records[0].get("uuid")
    if not uuid:
        raise ResourceNotFoundError(label, locator.value)

    logger.debug(f"Resolved {label} {locator.value!r} to {uuid}")
    return uuid
