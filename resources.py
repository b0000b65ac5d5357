"""resources.py — Path→bytes store, URL→path index and filename counters."""

from pathlib import PurePosixPath
from threading import Lock
from urllib.parse import urlsplit


class ResourceStore:
    """Ordered path→bytes table. The first registration of a path wins."""

    def __init__(self):
        self._entries: dict[str, bytes] = {}

    def register(self, path: str, data: bytes) -> None:
        if path not in self._entries:
            self._entries[path] = data

    def get(self, path: str) -> bytes | None:
        return self._entries.get(path)

    def paths(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, bytes]]:
        return list(self._entries.items())

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ResourceUrlIndex:
    """External URL → local path for every asset already materialized."""

    def __init__(self):
        self._paths: dict[str, str] = {}

    def resolve(self, url: str) -> str | None:
        return self._paths.get(url)

    def record(self, url: str, path: str) -> None:
        self._paths[url] = path

    def __contains__(self, url: str) -> bool:
        return url in self._paths

    def __len__(self) -> int:
        return len(self._paths)


class ResourceCounters:
    """Monotonic per-kind counters ("image", "css", "other") owned by one book."""

    KINDS = ("image", "css", "other")

    def __init__(self):
        self._next = {kind: 0 for kind in self.KINDS}
        self._lock = Lock()

    def allocate(self, kind: str) -> int:
        if kind not in self._next:
            raise ValueError(f"Unknown resource counter: '{kind}'")
        with self._lock:
            value = self._next[kind]
            self._next[kind] = value + 1
            return value


MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/avif": "avif",
    "application/octet-stream": "bin",
}

FALLBACK_EXTENSION = "bin"


def url_extension(url: str) -> str | None:
    """Extension of the URL's path, ignoring query and fragment."""
    path = urlsplit(url).path
    suffix = PurePosixPath(path).suffix.lstrip(".").lower()
    if suffix and suffix.isalnum() and len(suffix) <= 5:
        return suffix
    return None


def extension_for(content_type: str | None, url: str) -> str:
    """Pick a file extension: content-type table, then URL path, then 'bin'."""
    if content_type and content_type in MIME_EXTENSIONS:
        return MIME_EXTENSIONS[content_type]
    return url_extension(url) or FALLBACK_EXTENSION
