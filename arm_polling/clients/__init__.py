"""Resource clients built on the pipeline and the LRO poller."""

from arm_polling.clients.cdn_endpoints import CdnEndpointsClient

__all__ = ["CdnEndpointsClient"]
