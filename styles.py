"""styles.py — Localize url(...) references inside stylesheets."""

import posixpath
import re
from urllib.parse import urljoin

import httpx

from content import Advise, is_absolute_http
from fetcher import HttpFetcher
from resources import (
    FALLBACK_EXTENSION,
    ResourceCounters,
    ResourceStore,
    ResourceUrlIndex,
    url_extension,
)

CSS_URL_RE = re.compile(r"""url\(\s*['"]?(.*?)['"]?\s*\)""")


def find_css_urls(css: str) -> list[str]:
    """Distinct url(...) targets in order of first appearance."""
    urls = []
    for match in CSS_URL_RE.finditer(css):
        url = match.group(1).strip()
        if url and url not in urls:
            urls.append(url)
    return urls


def replace_urls(css: str, replacements: dict[str, str]) -> str:
    """
    Replace every literal occurrence of each URL in one pass, longest first.
    Matches outside url(...) are rewritten too.
    """
    replacements = {url: path for url, path in replacements.items() if url != path}
    if not replacements:
        return css
    pattern = re.compile("|".join(re.escape(url) for url in sorted(replacements, key=len, reverse=True)))
    return pattern.sub(lambda m: replacements[m.group(0)], css)


class StyleProcessor:
    def __init__(
        self,
        fetcher: HttpFetcher,
        store: ResourceStore,
        url_index: ResourceUrlIndex,
        counters: ResourceCounters,
        advise: Advise,
    ):
        self._fetcher = fetcher
        self._store = store
        self._url_index = url_index
        self._counters = counters
        self._advise = advise

    async def process(self, css: str, css_path: str, base_url: str | None = None) -> str:
        """
        Fetch and register every url(...) target not seen before, then
        rewrite the CSS to point at the local copies. Relative targets are
        resolved against ``base_url`` when the stylesheet itself was remote.
        Rewritten references are relative to ``css_path``, the stylesheet's own
        location in the package. Failed targets are left as written.
        """
        css_dir = posixpath.dirname(css_path) or "."
        replacements = {}
        for token in find_css_urls(css):
            if token.startswith(("data:", "#")):
                continue
            try:
                url = urljoin(base_url, token) if base_url else token
            except ValueError as e:
                self._advise("css_resource_failed", f"Failed to fetch CSS resource: {e}", token)
                continue
            local = self._url_index.resolve(url)
            if local is None:
                local = await self._materialize(url)
            if local is not None:
                replacements[token] = posixpath.relpath(local, css_dir)
        return replace_urls(css, replacements)

    async def _materialize(self, url: str) -> str | None:
        if not is_absolute_http(url):
            self._advise("css_resource_failed", "Failed to fetch CSS resource: not an absolute http(s) URL", url)
            return None
        try:
            result = await self._fetcher.fetch(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._advise("css_resource_failed", f"Failed to fetch CSS resource: {e}", url)
            return None
        if not result.ok:
            self._advise("css_resource_failed", f"Failed to fetch CSS resource: HTTP {result.status}", url)
            return None

        ext = url_extension(url) or FALLBACK_EXTENSION
        path = f"resources/res{self._counters.allocate('other')}.{ext}"
        self._store.register(path, result.content)
        self._url_index.record(url, path)
        return path
