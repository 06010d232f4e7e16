"""
Cat image fetching service.

Fetches one random cat image from TheCatAPI. The search endpoint answers
with a JSON envelope holding the image URL, which is then downloaded; an
endpoint that answers with image bytes directly is accepted as well.

No retries happen here: every failure is classified and raised.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from ..errors import (
    EmptyPayload,
    MalformedEnvelope,
    NetworkTimeout,
    UpstreamStatusError,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

# TheCatAPI endpoint
CAT_API_URL = "https://api.thecatapi.com/v1/images/search"

SEARCH_PARAMS = {
    "size": "med",
    "mime_types": "jpg,png",
    "limit": 1,
}


@dataclass(frozen=True)
class RawImage:
    """Undecoded image bytes as served by the provider."""
    content: bytes
    media_type: str
    source_url: str


def _media_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").split(";")[0].strip().lower()


def _is_envelope(response: httpx.Response) -> bool:
    # Image signatures never start with a JSON bracket
    if "json" in _media_type(response):
        return True
    return response.content.lstrip()[:1] in (b"[", b"{")


class CatImageClient:
    """Async TheCatAPI client with a shared httpx connection pool."""

    def __init__(
        self,
        api_url: str = CAT_API_URL,
        api_key: str = "",
        timeout: float = 10.0,
        user_agent: str = "catscii",
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with double-checked locking."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=httpx.Timeout(self.timeout),
                        headers={"User-Agent": self.user_agent},
                        follow_redirects=True,
                    )
        return self._client

    async def fetch(self) -> RawImage:
        """
        Fetch one random cat image.

        The whole exchange (search plus download) is bounded by ``timeout``.

        Raises:
            NetworkTimeout: the provider did not answer in time.
            UpstreamStatusError: the provider answered with a non-2xx status.
            UpstreamUnavailable: the provider could not be reached.
            MalformedEnvelope: the search response had no usable image URL.
            EmptyPayload: the provider answered with nothing.
        """
        started = time.perf_counter()
        try:
            image = await asyncio.wait_for(self._fetch(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkTimeout() from exc

        logger.info(
            "Fetched cat image %s (%s, %d bytes) in %.0f ms",
            image.source_url,
            image.media_type or "unknown type",
            len(image.content),
            (time.perf_counter() - started) * 1000,
        )
        return image

    async def _fetch(self) -> RawImage:
        headers = {}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        response = await self._get(self.api_url, headers=headers, params=SEARCH_PARAMS)
        if not response.content:
            raise EmptyPayload()

        if not _is_envelope(response):
            # Provider served the image itself
            return RawImage(
                content=response.content,
                media_type=_media_type(response),
                source_url=str(response.url),
            )

        image_url = self._image_url_from_envelope(response)
        image_response = await self._get(image_url)
        if not image_response.content:
            raise EmptyPayload(f"Cat image at {image_url} is empty")

        return RawImage(
            content=image_response.content,
            media_type=_media_type(image_response),
            source_url=image_url,
        )

    @staticmethod
    def _image_url_from_envelope(response: httpx.Response) -> str:
        """Pull the first image URL out of a ``[{"url": ...}]`` envelope."""
        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedEnvelope("Cat image provider sent invalid JSON") from exc

        if not isinstance(data, list):
            raise MalformedEnvelope()
        if not data:
            raise EmptyPayload("Cat image provider returned no images")

        first = data[0]
        url = first.get("url") if isinstance(first, dict) else None
        if not isinstance(url, str) or not url:
            raise MalformedEnvelope()
        return url

    async def _get(self, url: str, **kwargs) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.get(url, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkTimeout() from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailable(
                f"Cat image provider is unreachable ({exc.__class__.__name__})"
            ) from exc

        if not response.is_success:
            raise UpstreamStatusError(response.status_code, url)
        return response

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
