"""
HTTP client for posting hook events to the event server.
"""

import logging
from typing import Any, Optional

import httpx

from ..errors import UpstreamError, UpstreamTimeoutError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

USER_AGENT = "hook-monitor/forward-hook"


class BackendClient:
    """Posts event payloads to the event server's /events endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def post_event(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Post one event payload and return the server's JSON response.

        Raises:
            UpstreamTimeoutError: The request exceeded the timeout.
            UpstreamUnavailableError: The server could not be reached.
            UpstreamError: The server answered with an error status.
        """
        event = payload.get("event") if isinstance(payload.get("event"), dict) else payload
        headers = {
            "X-API-Key": self.api_key,
            "X-Hook-Event": str(event.get("hook_event_name") or "unknown"),
            "User-Agent": USER_AGENT,
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json=payload, headers=headers)
        except httpx.TimeoutException:
            raise UpstreamTimeoutError(self.timeout)
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(f"Network error: {e}")

        if response.status_code >= 400:
            raise UpstreamError(
                f"Backend returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        server_version = response.headers.get("X-Server-Version")
        events_count = response.headers.get("X-Events-Count")
        if server_version:
            logger.debug(f"Server version: {server_version}")
        if events_count:
            logger.debug(f"Total events stored: {events_count}")

        try:
            return response.json()
        except ValueError:
            raise UpstreamError("Backend returned a non-JSON response", status_code=response.status_code)
