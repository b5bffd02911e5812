"""
Client for the streaming debate endpoint.

The endpoint accepts the project and its evaluations and answers with a
chunked Server-Sent-Events body. This client treats it as a plain byte
source; all parsing happens in stream_parser.py.
"""

import logging
from typing import AsyncIterator, Optional

import httpx

from shared.config import get_settings

from .exceptions import (
    DebateStreamError,
    DebateRateLimitedError,
    DebateCreditsExhaustedError,
)
from .models import LiveDebateRequest

logger = logging.getLogger(__name__)


class DebateGatewayClient:
    """Streams raw debate bytes from the configured endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 120.0,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def stream(self, request: LiveDebateRequest) -> AsyncIterator[bytes]:
        """
        POST the request and yield response body chunks as they arrive.

        Raises:
            DebateRateLimitedError: On HTTP 429
            DebateCreditsExhaustedError: On HTTP 402
            DebateStreamError: On any other non-success status or
                transport failure
        """
        if not self.is_configured:
            raise DebateStreamError("endpoint URL not configured")

        body = request.model_dump(mode="json")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                async with client.stream(
                    "POST", self.url, json=body, headers=self._headers()
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        raise self._status_error(response)

                    async for chunk in response.aiter_bytes():
                        if chunk:
                            yield chunk
        except httpx.HTTPError as e:
            logger.warning(f"Debate stream transport error: {e}")
            raise DebateStreamError(str(e)) from e

    @staticmethod
    def _status_error(response: httpx.Response) -> DebateStreamError:
        status = response.status_code
        if status == 429:
            return DebateRateLimitedError()
        if status == 402:
            return DebateCreditsExhaustedError()
        return DebateStreamError(
            f"endpoint returned {status}: {response.text[:200]}",
            status_code=status,
        )


_client_instance: Optional[DebateGatewayClient] = None


def get_gateway_client() -> DebateGatewayClient:
    """Get the gateway client singleton built from settings."""
    global _client_instance
    if _client_instance is None:
        settings = get_settings()
        _client_instance = DebateGatewayClient(
            url=settings.debate_stream_url,
            api_key=settings.debate_stream_api_key,
            timeout=settings.debate_stream_timeout,
        )
    return _client_instance


def reset_gateway_client() -> None:
    """Reset the gateway client singleton (for testing)."""
    global _client_instance
    _client_instance = None
