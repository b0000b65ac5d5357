"""content.py — Turn caller HTML fragments into chapter bodies with local images."""

import asyncio
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from fetcher import FetchResult, HttpFetcher
from models import StagedResource
from resources import ResourceCounters, ResourceUrlIndex, extension_for
from writers.base import escape_xml

CONTENT_TYPES = ("text", "html")

Advise = Callable[[str, str, str | None], None]


@dataclass
class NormalizedContent:
    html: str
    resources: list[StagedResource] = field(default_factory=list)


def extract_content(html: str) -> str:
    """Inner HTML of the first <article>, else of <body>, else the input itself."""
    soup = BeautifulSoup(html, "html.parser")
    for name in ("article", "body"):
        region = soup.find(name)
        if region is not None:
            return region.decode_contents()
    return html


def wrap_content(content: str, title: str, content_type: str, insert_title: bool) -> str:
    """
    "text" → <pre> block, "html" → passthrough; either way optionally
    headed by the escaped title.
    """
    if content_type not in CONTENT_TYPES:
        raise ValueError(
            f"Unsupported content type: '{content_type}'. "
            f"Supported: {', '.join(CONTENT_TYPES)}"
        )
    heading = f"<h1>{escape_xml(title)}</h1>" if insert_title else ""
    if content_type == "text":
        return f"<pre>{heading}{content}</pre>"
    return f"{heading}{content}"


def is_absolute_http(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        # e.g. "http://[::1/a.png" (unbalanced IPv6 brackets)
        return False
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


class ContentNormalizer:
    """Extracts, wraps and localizes the images of one chapter at a time."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        url_index: ResourceUrlIndex,
        counters: ResourceCounters,
        advise: Advise,
        secure_context: bool = False,
    ):
        self._fetcher = fetcher
        self._url_index = url_index
        self._counters = counters
        self._advise = advise
        self.secure_context = secure_context

    async def normalize(
        self, content: str, title: str, content_type: str, insert_title: bool = True
    ) -> NormalizedContent:
        """
        Returns the chapter body plus the image resources it now references.
        Per-image failures drop the <img>; a parser rejection returns the
        input unchanged. Nothing is registered here.
        """
        try:
            body = extract_content(content)
        except ParserRejectedMarkup as e:
            self._advise("content_parse_failed", f"Could not parse content, using it as is: {e}", None)
            body = content

        wrapped = wrap_content(body, title, content_type, insert_title)

        try:
            return await self._localize_images(wrapped)
        except ParserRejectedMarkup as e:
            self._advise("content_parse_failed", f"Could not parse content, using it as is: {e}", None)
            return NormalizedContent(html=content)

    async def _localize_images(self, html: str) -> NormalizedContent:
        # html.parser adds no <html>/<body>, and stray end tags are ignored
        soup = BeautifulSoup(html, "html.parser")

        # Same URL twice in one fragment → one fetch, one file
        pending: dict[str, list] = {}
        for img in soup.find_all("img"):
            src = (img.get("src") or "").strip()
            if not src:
                continue
            local = self._url_index.resolve(src)
            if local is not None:
                img["src"] = local
                continue
            pending.setdefault(src, []).append(img)

        outcomes = await asyncio.gather(*(self._fetch_image(url) for url in pending))

        staged = []
        for (url, images), outcome in zip(pending.items(), outcomes):
            if outcome is None:
                for img in images:
                    img.decompose()
                continue
            fetched_url, result = outcome
            ext = extension_for(result.content_type, fetched_url)
            path = f"images/img{self._counters.allocate('image')}.{ext}"
            for img in images:
                img["src"] = path
            staged.append(StagedResource(url=url, path=path, data=result.content))

        return NormalizedContent(html=soup.decode(), resources=staged)

    async def _fetch_image(self, url: str) -> tuple[str, FetchResult] | None:
        if not is_absolute_http(url):
            self._advise("image_skipped", "img src is not an absolute http(s) URL", url)
            return None

        target = url
        if self.secure_context and url.lower().startswith("http://"):
            target = "https://" + url[len("http://"):]
            self._advise(
                "mixed_content_upgraded",
                'Mixed content: image is transported by unsafe protocol "http", upgraded to https',
                url,
            )

        try:
            result = await self._fetcher.fetch(target)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._advise("image_fetch_failed", f"Image processing failed: {e}", url)
            return None

        if not result.ok:
            self._advise("image_fetch_failed", f"Image processing failed: HTTP {result.status}", url)
            return None
        return target, result
