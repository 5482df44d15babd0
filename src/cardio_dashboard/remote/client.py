"""HTTP transport to the ECG backend.

Thin wrapper over httpx.AsyncClient that turns every transport-level problem
into the dashboard error taxonomy. Knows nothing about operation kinds.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from cardio_dashboard.core.errors import MalformedResponseError, NetworkError, ServerError
from cardio_dashboard.remote.endpoints import Endpoint

# Max characters of an error body echoed into messages and logs
_ERROR_BODY_CHARS = 200


class BackendClient:
    """Issues single-attempt JSON requests against the backend.

    Args:
        base_url: Backend root URL, e.g. "http://127.0.0.1:8000"
        timeout: Per-request timeout in seconds; None waits indefinitely
        client: Pre-built httpx.AsyncClient (tests inject one with a MockTransport)
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def call(self, endpoint: Endpoint, payload: Any = None) -> Any:
        """Send one request and return the decoded body.

        JSON bodies are decoded; other bodies are returned as text; an empty
        body yields None. A payload of None sends no body at all.

        Raises:
            NetworkError: Backend unreachable, connection dropped, timed out or
                any other httpx request failure
            ServerError: Non-2xx status
            MalformedResponseError: Body that fails content decoding, or a 2xx
                status with invalid JSON
        """
        logger.debug(f"-> {endpoint}")
        try:
            if payload is None:
                response = await self._client.request(endpoint.method, endpoint.path)
            else:
                response = await self._client.request(endpoint.method, endpoint.path, json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"request to {endpoint.path} timed out") from e
        except httpx.DecodingError as e:
            raise MalformedResponseError(f"backend sent an undecodable body ({e})") from e
        except httpx.TransportError as e:
            detail = str(e) or type(e).__name__
            raise NetworkError(f"could not reach backend ({detail})") from e
        except httpx.HTTPError as e:
            # Redirect loops and other request-level failures
            detail = str(e) or type(e).__name__
            raise NetworkError(f"request to {endpoint.path} failed ({detail})") from e

        logger.debug(f"<- {endpoint}: {response.status_code}")
        if not response.is_success:
            body = response.text[:_ERROR_BODY_CHARS]
            message = f"backend responded {response.status_code}"
            if body:
                message = f"{message}: {body}"
            raise ServerError(message, status_code=response.status_code)

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"backend sent invalid JSON: {e}", status_code=response.status_code
            ) from e

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
