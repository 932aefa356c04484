"""Typed overlays for ONTAP REST payloads.

ONTAP response bodies vary per resource, so the core passes them around
as plain dicts. These models validate only the envelope fields the core
relies on and keep every other vendor field (``extra="allow"``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# States reported by /api/cluster/jobs/{uuid}
PENDING_JOB_STATES = frozenset({"queued", "running", "paused"})
JOB_SUCCESS = "success"
JOB_FAILURE = "failure"


class Link(BaseModel):
    """A single HAL link."""

    href: str | None = None

    model_config = ConfigDict(extra="allow")


class HalLinks(BaseModel):
    """The ``_links`` block of a HAL response."""

    self_: Link | None = Field(default=None, alias="self")
    next: Link | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class OntapApiResponse(BaseModel):
    """Envelope of an ONTAP REST response."""

    records: list[Any] | None = None
    num_records: int | None = None
    links: HalLinks | None = Field(default=None, alias="_links")
    job: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def next_href(self) -> str | None:
        """The ``_links.next.href`` pagination cursor, if any."""
        if self.links is None or self.links.next is None:
            return None
        return self.links.next.href or None
