"""
Sending request envelopes to the server over HTTP.
"""
import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from tracker.core.config import settings
from tracker.schemas.protocol import decode_response, encode_message

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class TransportError(Exception):
    """The request could not be delivered or its response could not be read."""


class UnexpectedResponseError(TransportError):
    """The server answered with a valid message of the wrong variant."""

    def __init__(self, response: BaseModel):
        super().__init__(f"unexpected response from server: {response!r}")
        self.response = response


class RpcTransport:
    """
    Sends protocol messages to the server's RPC endpoint.

    The transport owns an ``httpx.AsyncClient`` so connections are reused
    between requests; close it with ``aclose`` or use the transport as an
    async context manager.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        server_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.server_url = server_url or settings.SERVER_URL
        if timeout is None:
            timeout = settings.CLIENT_TIMEOUT_SECONDS
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.timeout = timeout

    async def send(self, request: BaseModel, expect: Type[R]) -> R:
        """
        Send a request envelope and return the response envelope.

        Args:
            request: Any request variant
            expect: The response variant the request is answered with

        Returns:
            The decoded response

        Raises:
            TransportError: On network failure, timeout, a non-2xx status or
                an undecodable body
            UnexpectedResponseError: If the response is a different variant
        """
        logger.debug(f"Sending {request.__class__.__name__} to {self.server_url}")
        try:
            response = await self.client.post(
                self.server_url,
                content=encode_message(request),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Request to {self.server_url} failed: {e!r}")
            raise TransportError(f"request failed: {e!r}") from e

        try:
            msg = decode_response(response.content)
        except ValidationError as e:
            logger.error(f"Could not decode response from server: {e}")
            raise TransportError(f"invalid response from server: {e}") from e

        if not isinstance(msg, expect):
            raise UnexpectedResponseError(msg)
        return msg

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "RpcTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
