"""HTTP transport that exposes a single GET as a lazy producer."""
import asyncio
import logging

import requests

from streams.producer import Producer

logger = logging.getLogger(__name__)


class HttpTransport:
    """Issues GET requests against the EONET service."""

    def __init__(self, timeout: int = 30):
        """
        Initialize the transport.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def fetch(self, url: str) -> Producer[bytes]:
        """
        Create a producer for the body of a GET request.

        No request is made until the producer is subscribed to. Each
        subscription sends exactly one request and emits the response body.

        Args:
            url: Absolute URL to fetch

        Returns:
            Producer emitting the response payload bytes once
        """
        return Producer.from_coroutine(self._get, url)

    async def _get(self, url: str) -> bytes:
        """
        Send the GET request on a worker thread.

        Args:
            url: Absolute URL to fetch

        Returns:
            Response body

        Raises:
            requests.RequestException: On network failure or an error status
        """
        logger.info(f"Fetching {url}")
        try:
            response = await asyncio.to_thread(requests.get, url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise

        logger.debug(f"Received {len(response.content)} bytes from {url}")
        return response.content
