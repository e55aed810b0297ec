"""CDN endpoints client (Microsoft.Cdn, API version 2016-04-02).

Every operation follows the same shape: validate the path parameters,
expand the URL template, send through the pipeline, then either
deserialize the body or hand the initiating response to ``LROPoller``.

Long-running operations return the poller; call
``poller.poll_until_done(deserialize=Endpoint.from_dict)`` to wait.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from arm_polling.core.exceptions import ValidationError
from arm_polling.models.endpoint import Endpoint
from arm_polling.pipeline.base import unmarshal_arm_error
from arm_polling.polling.poller import LROPoller

if TYPE_CHECKING:
    import httpx

    from arm_polling.pipeline.base import ErrorUnmarshaller
    from arm_polling.pipeline.http import HttpPipeline

logger = logging.getLogger(__name__)

API_VERSION = "2016-04-02"

_ENDPOINT_PATH = (
    "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
    "/providers/Microsoft.Cdn/profiles/{profileName}/endpoints/{endpointName}"
)

# Status codes each operation accepts on its initiating response.
_CREATE_CODES = frozenset({200, 201, 202})
_UPDATE_CODES = frozenset({200, 202})
_DELETE_CODES = frozenset({200, 202, 204})
_PURGE_CODES = frozenset({200, 202})


class CdnEndpointsClient:
    """Operations on ``Microsoft.Cdn/profiles/endpoints``.

    Args:
        pipeline: Pipeline used to build and send requests.
        subscription_id: Azure subscription the resources live in.
        error_unmarshaller: Converts failure responses into exceptions.
    """

    def __init__(
        self,
        pipeline: HttpPipeline,
        subscription_id: str,
        *,
        error_unmarshaller: ErrorUnmarshaller = unmarshal_arm_error,
    ) -> None:
        _require("subscription_id", subscription_id)
        self._pipeline = pipeline
        self._subscription_id = subscription_id
        self._error_unmarshaller = error_unmarshaller

    def get(self, resource_group: str, profile: str, endpoint: str) -> Endpoint:
        """Return an existing endpoint.

        Raises:
            OperationFailedError: If the service does not answer 200.
        """
        response = self._send("GET", self._endpoint_path(resource_group, profile, endpoint))
        if response.status_code != 200:
            raise self._error_unmarshaller(response)
        return Endpoint.from_dict(response.json())

    def begin_create(
        self,
        resource_group: str,
        profile: str,
        endpoint: str,
        parameters: Endpoint,
    ) -> LROPoller:
        """Start creating an endpoint (PUT). Accepts 200, 201 and 202."""
        path = self._endpoint_path(resource_group, profile, endpoint)
        return self._begin("PUT", path, _CREATE_CODES, json=parameters.to_dict())

    def begin_update(
        self,
        resource_group: str,
        profile: str,
        endpoint: str,
        tags: dict[str, str],
    ) -> LROPoller:
        """Start updating an endpoint's tags (PATCH). Accepts 200 and 202."""
        path = self._endpoint_path(resource_group, profile, endpoint)
        return self._begin("PATCH", path, _UPDATE_CODES, json={"tags": dict(tags)})

    def begin_delete(self, resource_group: str, profile: str, endpoint: str) -> LROPoller:
        """Start deleting an endpoint (DELETE). Accepts 200, 202 and 204."""
        path = self._endpoint_path(resource_group, profile, endpoint)
        return self._begin("DELETE", path, _DELETE_CODES)

    def begin_purge_content(
        self,
        resource_group: str,
        profile: str,
        endpoint: str,
        content_paths: list[str],
    ) -> LROPoller:
        """Start purging cached content (POST ``/purge``). Accepts 200 and 202."""
        if not content_paths:
            msg = "content_paths must contain at least one path"
            raise ValidationError(msg, stage="cdn_endpoints")
        path = self._endpoint_path(resource_group, profile, endpoint) + "/purge"
        body = {"contentPaths": list(content_paths)}
        return self._begin("POST", path, _PURGE_CODES, json=body)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _endpoint_path(self, resource_group: str, profile: str, endpoint: str) -> str:
        _require("resource_group", resource_group)
        _require("profile", profile)
        _require("endpoint", endpoint)
        return _ENDPOINT_PATH.format(
            subscriptionId=quote(self._subscription_id, safe=""),
            resourceGroupName=quote(resource_group, safe=""),
            profileName=quote(profile, safe=""),
            endpointName=quote(endpoint, safe=""),
        )

    def _send(self, method: str, path: str, *, json: object = None) -> httpx.Response:
        request = self._pipeline.build_request(
            method,
            path,
            params={"api-version": API_VERSION},
            json=json,
        )
        return self._pipeline.send(request)

    def _begin(
        self,
        method: str,
        path: str,
        accepted: frozenset[int],
        *,
        json: object = None,
    ) -> LROPoller:
        response = self._send(method, path, json=json)
        logger.info(
            "CDN endpoint operation started | method=%s | path=%s | status_code=%d",
            method,
            path,
            response.status_code,
        )
        if response.status_code not in accepted:
            raise self._error_unmarshaller(response)
        return LROPoller.from_response(
            response,
            self._pipeline,
            self._error_unmarshaller,
            config=self._pipeline.config,
        )


def _require(name: str, value: str) -> None:
    """Raise ``ValidationError`` if a path parameter is empty."""
    if not value:
        msg = f"{name} must be a non-empty string"
        raise ValidationError(msg, stage="cdn_endpoints")
