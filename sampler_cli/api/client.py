"""
Async client for the audio processing service's HTTP API (v1).
"""

import asyncio
import logging
import time
from http import HTTPStatus
from typing import Any, Optional

import aiohttp
from pydantic import BaseModel, ValidationError
from rich.markup import escape

from sampler_cli.core.modes import ModeRegistry
from sampler_cli.exceptions import StructuredFailureError, TransportFailureError
from sampler_cli.models.state import ProcessingRequest

log = logging.getLogger(__name__)

TRANSPORT_FAILURE_MESSAGE = (
    "Network error: could not reach the audio processing service."
)


def status_line(status: int, reason: Optional[str]) -> str:
    """Builds the fallback error text; a missing reason uses the standard phrase."""
    if not reason:
        try:
            reason = HTTPStatus(status).phrase
        except ValueError:
            reason = ""
    return f"HTTP {status}: {reason}"


class HealthStatus(BaseModel):
    """Body of the service's health endpoint."""

    status: str
    version: str
    uptime_seconds: int = 0


class AudioServiceClient:
    """
    Sends processing requests as multipart uploads and interprets the replies.

    Every failure leaves this class as either a `StructuredFailureError` (the
    service answered with an error status) or a `TransportFailureError` (no
    answer was received).
    """

    HEALTH_ENDPOINT = "/api/v1/health"

    def __init__(
        self,
        base_url: str,
        timeout: float = 300.0,
        connect_timeout: float = 15.0,
        registry: Optional[ModeRegistry] = None,
    ):
        """
        Initializes the client.

        Args:
            base_url: Root URL of the service, e.g. 'http://localhost:8080'.
            timeout: Total seconds allowed for a single request.
            connect_timeout: Seconds allowed to establish the connection.
            registry: Mode registry used to resolve endpoints and form fields.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.registry = registry or ModeRegistry()
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout, connect=self.connect_timeout
                ),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "AudioServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def process(self, request: ProcessingRequest) -> bytes:
        """
        Uploads the request's file with its mode parameters and returns the
        artifact bytes.

        Raises:
            StructuredFailureError: The service returned a non-success status.
            TransportFailureError: The request never produced a response.
        """
        endpoint = self.registry.endpoint_for(request.mode)
        fields = self.registry.form_fields(request.mode, request.parameters)

        form = aiohttp.FormData()
        form.add_field(
            "file",
            await request.file.read(),
            filename=request.file.name,
            content_type="audio/wav",
        )
        for name, value in fields.items():
            form.add_field(name, value)

        session = await self._initialize_session()
        start_time = time.monotonic()
        try:
            async with session.post(self.base_url + endpoint, data=form) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(
                    f"POST {endpoint} -> {r.status} in {duration_ms:.0f} ms"
                )
                if not r.ok:
                    raise StructuredFailureError(
                        await self._extract_error_message(r), status=r.status
                    )
                return await r.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(
                f"Request to {endpoint} failed before a response: {escape(repr(e))}"
            )
            raise TransportFailureError(TRANSPORT_FAILURE_MESSAGE) from e

    @staticmethod
    async def _extract_error_message(response: aiohttp.ClientResponse) -> str:
        """
        Prefers the 'error' field of a JSON body, falling back to the status line.

        A body that is present but not a usable error document is treated the
        same as an absent one.
        """
        fallback = status_line(response.status, response.reason)
        try:
            body: Any = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as e:
            log.debug(f"Error body was not JSON: {escape(str(e))}")
            return fallback

        if isinstance(body, dict):
            message = body.get("error")
            if isinstance(message, str) and message.strip():
                return message
        return fallback

    async def health(self) -> HealthStatus:
        """
        Fetches the service's health document.

        Raises:
            StructuredFailureError: The endpoint answered with an error status
                or an unreadable body.
            TransportFailureError: The service could not be reached.
        """
        session = await self._initialize_session()
        try:
            async with session.get(self.base_url + self.HEALTH_ENDPOINT) as r:
                if not r.ok:
                    raise StructuredFailureError(
                        await self._extract_error_message(r), status=r.status
                    )
                try:
                    return HealthStatus.model_validate(await r.json(content_type=None))
                except (ValueError, ValidationError) as e:
                    raise StructuredFailureError(
                        f"Unexpected health response: {e}", status=r.status
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportFailureError(TRANSPORT_FAILURE_MESSAGE) from e
