"""writers/base.py — Shared helpers for the generated XML/XHTML documents."""

import re
from typing import Iterable, TypeVar
from xml.sax.saxutils import escape

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

NAV_FILE = "nav.xhtml"
NCX_FILE = "toc.ncx"
OPF_FILE = "content.opf"
COVER_IMAGE_FILE = "images/cover.jpg"
COVER_PAGE_FILE = "cover.xhtml"

# Names the assembler writes itself; resources may not claim them
RESERVED_PATHS = frozenset({NAV_FILE, NCX_FILE, OPF_FILE})

MEDIA_TYPES = {
    ".xhtml": "application/xhtml+xml",
    ".css": "text/css",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}
DEFAULT_MEDIA_TYPE = "application/octet-stream"

_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}
_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9]")

T = TypeVar("T")


def escape_xml(text: str | None) -> str:
    """Escape the five reserved XML characters."""
    return escape(text or "", _XML_ENTITIES)


def by_index(items: Iterable[T]) -> list[T]:
    """Sort volumes/chapters by .index; equal indices keep insertion order."""
    return sorted(items, key=lambda item: item.index)


def media_type_for(path: str) -> str:
    lowered = path.lower()
    for suffix, media in MEDIA_TYPES.items():
        if lowered.endswith(suffix):
            return media
    return DEFAULT_MEDIA_TYPE


def manifest_id(path: str) -> str:
    """'images/img0.jpg' → 'images-img0-jpg'; ids never start with a digit."""
    token = _UNSAFE_ID_CHARS.sub("-", path)
    if not token[:1].isalpha():
        token = f"id-{token}"
    return token


def manifest_ids(paths: Iterable[str], taken: Iterable[str] = ()) -> dict[str, str]:
    """Assign a unique manifest id to every path, suffixing collisions."""
    used = set(taken)
    ids = {}
    for path in paths:
        base = candidate = manifest_id(path)
        n = 2
        while candidate in used:
            candidate = f"{base}-{n}"
            n += 1
        used.add(candidate)
        ids[path] = candidate
    return ids
