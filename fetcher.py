"""fetcher.py — Async HTTP fetching for images, stylesheets and cover art."""

from dataclasses import dataclass

import httpx

from config import Settings

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class FetchError(RuntimeError):
    """Raised when a fetch completes with a non-success HTTP status."""

    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status} fetching {url}")
        self.url = url
        self.status = status


@dataclass(frozen=True)
class FetchResult:
    status: int
    content_type: str   # Media type only, parameters stripped
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


def media_type(header: str | None) -> str:
    """'image/png; charset=binary' → 'image/png'."""
    if not header:
        return DEFAULT_CONTENT_TYPE
    return header.split(";", 1)[0].strip().lower() or DEFAULT_CONTENT_TYPE


class HttpFetcher:
    """Thin wrapper around httpx.AsyncClient.

    Network failures propagate as httpx.HTTPError; callers decide whether
    they are fatal.
    """

    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None):
        settings = settings or Settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.http_timeout,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )

    async def fetch(self, url: str) -> FetchResult:
        response = await self._client.get(url)
        return FetchResult(
            status=response.status_code,
            content_type=media_type(response.headers.get("content-type")),
            content=response.content,
        )

    async def fetch_ok(self, url: str) -> FetchResult:
        result = await self.fetch(url)
        if not result.ok:
            raise FetchError(url, result.status)
        return result

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
