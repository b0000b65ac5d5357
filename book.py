"""book.py — EpubBook: volumes, chapters, stylesheets and finalize()."""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable
from uuid import uuid4

from archive import build_archive
from config import Settings
from content import ContentNormalizer
from fetcher import HttpFetcher
from log_config import get_logger
from models import Advisory, BookMetadata, Chapter, StagedResource, StyleSheet
from resources import ResourceCounters, ResourceStore, ResourceUrlIndex
from styles import StyleProcessor
from writers import (
    chapter_xhtml,
    cover_xhtml,
    generate_nav,
    generate_ncx,
    generate_opf,
    volume_xhtml,
)
from writers.base import COVER_IMAGE_FILE, COVER_PAGE_FILE, RESERVED_PATHS

logger = get_logger(__name__)

REMOTE_CSS_RE = re.compile(r"^https?://", re.IGNORECASE)
GLOBAL_CSS_INDEX = 0


class Volume:
    """A titled group of chapters; handed out by EpubBook.add_volume()."""

    def __init__(self, book: "EpubBook", title: str, index: int):
        self._book = book
        self.title = title
        self.index = index
        self.chapters: list[Chapter] = []
        self.container_file = f"volume_{index}.xhtml"
        book.store.register(self.container_file, volume_xhtml(title).encode("utf-8"))

    async def add_chapter(
        self,
        index: int,
        content: str,
        title: str,
        content_type: str,
        insert_title: bool = True,
        use_global_css: bool = True,
        css_list: Iterable[int] = (),
    ) -> int:
        """
        Normalize ``content``, localize its images, and store the chapter page
        as chapter_<volume>_<index>.xhtml. Returns ``index``.
        """
        book = self._book
        normalized = await book._normalizer.normalize(content, title, content_type, insert_title)
        book._register_staged(normalized.resources)

        links = [sheet.filename for sheet in book.stylesheet_links(use_global_css, css_list)]
        xhtml = chapter_xhtml(title, normalized.html, links)
        filename = f"chapter_{self.index}_{index}.xhtml"
        book.store.register(filename, xhtml.encode("utf-8"))
        self.chapters.append(Chapter(index=index, title=title, filename=filename))
        return index


class EpubBook:
    """
    In-memory e-book under construction.

    Intended for a single writer. Image fetches inside one add_chapter()
    call run concurrently; filename counters are owned by the book and
    allocated under a lock.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: HttpFetcher | None = None,
        on_advisory: Callable[[Advisory], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings or Settings()
        self.metadata = BookMetadata(identifier=str(uuid4()), language=self.settings.language)
        self.store = ResourceStore()
        self.url_index = ResourceUrlIndex()
        self.counters = ResourceCounters()
        self.volumes: list[Volume] = []
        self.stylesheets: list[StyleSheet] = []
        self.advisories: list[Advisory] = []
        self._css_map: dict[str, int] = {}
        self._on_advisory = on_advisory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or HttpFetcher(self.settings)
        self._normalizer = ContentNormalizer(
            self._fetcher,
            self.url_index,
            self.counters,
            self._advise,
            secure_context=self.settings.secure_context,
        )
        self._styles = StyleProcessor(
            self._fetcher, self.store, self.url_index, self.counters, self._advise
        )

    async def __aenter__(self) -> "EpubBook":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_fetcher:
            await self._fetcher.aclose()

    # --- metadata -------------------------------------------------------

    async def set_info(self, tag: str, value: str | bytes) -> None:
        """
        Set a metadata tag. ``cover`` accepts raw bytes or a URL, which is
        fetched right away; fetch failures propagate.
        """
        if tag == "cover":
            if isinstance(value, str):
                result = await self._fetcher.fetch_ok(value)
                value = result.content
            elif not isinstance(value, (bytes, bytearray)):
                raise TypeError(f"cover must be bytes or a URL, got {type(value).__name__}")
            self.metadata.cover = bytes(value)
        elif tag in ("bookname", "author", "introduction", "language"):
            setattr(self.metadata, tag, str(value))
        else:
            self.metadata.extra[tag] = value

    # --- catalog --------------------------------------------------------

    def add_volume(self, title: str, index: int) -> Volume:
        volume = Volume(self, title, index)
        self.volumes.append(volume)
        return volume

    async def add_css(
        self, index: int, content: str, filename: str | None = None, map_name: str = ""
    ) -> int:
        """
        Register a stylesheet. ``content`` is CSS text or an http(s) URL to
        fetch it from. Resources it references through url(...) are fetched
        and rewritten to local copies. Returns ``index``.
        """
        base_url = None
        if REMOTE_CSS_RE.match(content):
            base_url = content
            content = (await self._fetcher.fetch_ok(content)).text

        if not filename:
            filename = f"Styles/style{self.counters.allocate('css')}.css"

        css = await self._styles.process(content, filename, base_url)
        self.store.register(filename, css.encode("utf-8"))
        self.stylesheets.append(StyleSheet(index=index, filename=filename, map_name=map_name))
        if map_name:
            self._css_map[map_name] = index
        return index

    async def create_css_map(self, mapping: dict[str, str]) -> dict[str, int]:
        """
        Add each named stylesheet after the highest index in use. The map
        name doubles as the filename, so a name without ".css" is listed
        in the manifest as application/octet-stream.
        """
        results = {}
        next_index = max([sheet.index for sheet in self.stylesheets] + [0])
        for map_name, content in mapping.items():
            next_index += 1
            await self.add_css(next_index, content, map_name, map_name)
            results[map_name] = next_index
        return results

    def css_index(self, map_name: str) -> int | None:
        return self._css_map.get(map_name)

    def find_stylesheet(self, index: int) -> StyleSheet | None:
        for sheet in self.stylesheets:
            if sheet.index == index:
                return sheet
        return None

    def stylesheet_links(self, use_global_css: bool, css_list: Iterable[int]) -> list[StyleSheet]:
        """Global stylesheet first (if wanted and present), then css_list; unknown indices are skipped."""
        wanted = ([GLOBAL_CSS_INDEX] if use_global_css else []) + list(css_list)
        links = []
        for index in wanted:
            sheet = self.find_stylesheet(index)
            if sheet is not None:
                links.append(sheet)
        return links

    # --- output ---------------------------------------------------------

    def finalize(self) -> bytes:
        """Generate the package documents and return the zipped book."""
        if self.metadata.cover is not None:
            self.store.register(COVER_IMAGE_FILE, self.metadata.cover)
            self.store.register(COVER_PAGE_FILE, cover_xhtml().encode("utf-8"))

        resources = []
        for path, data in self.store.items():
            if path in RESERVED_PATHS:
                self._advise("reserved_path_skipped", "Resource path is reserved for a generated document", path)
                continue
            resources.append((path, data))

        modified = self._clock().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        opf = generate_opf(self.volumes, [path for path, _ in resources], self.metadata, modified)
        ncx = generate_ncx(self.volumes, self.metadata.identifier, self.metadata.bookname)
        nav = generate_nav(self.volumes)
        return build_archive(opf, ncx, nav, resources)

    def save(self, output_path: Path | str) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.finalize())
        return output_path

    # --- internals ------------------------------------------------------

    def _register_staged(self, resources: list[StagedResource]) -> None:
        for resource in resources:
            self.url_index.record(resource.url, resource.path)
            self.store.register(resource.path, resource.data)

    def _advise(self, kind: str, message: str, url: str | None = None) -> None:
        advisory = Advisory(kind=kind, message=message, url=url)
        self.advisories.append(advisory)
        logger.warning(kind, detail=message, url=url)
        if self._on_advisory is not None:
            self._on_advisory(advisory)
