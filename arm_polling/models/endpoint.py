"""CDN endpoint model used by ``CdnEndpointsClient``.

Only the fields the client round-trips are modelled; everything else
the service returns is preserved in ``properties``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Endpoint:
    """A CDN endpoint resource.

    Attributes:
        location: Azure region (e.g. ``"westus"``).
        origins: Origin host names served by the endpoint.
        tags: Resource tags.
        id: ARM resource ID (set by the service).
        name: Endpoint name (set by the service).
        provisioning_state: Service-reported provisioning state.
        properties: Remaining ``properties`` fields, untouched.
    """

    location: str
    origins: tuple[str, ...] = ()
    tags: dict[str, str] = field(default_factory=dict)
    id: str = ""
    name: str = ""
    provisioning_state: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Endpoint:
        """Build an ``Endpoint`` from a decoded ARM resource body."""
        properties = dict(data.get("properties") or {})
        origins = tuple(
            str(origin.get("properties", {}).get("hostName", ""))
            for origin in properties.pop("origins", [])
        )
        return cls(
            location=str(data.get("location", "")),
            origins=origins,
            tags={str(k): str(v) for k, v in (data.get("tags") or {}).items()},
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            provisioning_state=str(properties.pop("provisioningState", "")),
            properties=properties,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the request body for a create call."""
        properties: dict[str, Any] = dict(self.properties)
        properties["origins"] = [
            {"name": _origin_name(host), "properties": {"hostName": host}}
            for host in self.origins
        ]
        body: dict[str, Any] = {"location": self.location, "properties": properties}
        if self.tags:
            body["tags"] = dict(self.tags)
        return body


def _origin_name(host: str) -> str:
    """Derive an origin resource name from its host name."""
    return host.replace(".", "-")
