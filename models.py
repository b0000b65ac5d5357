"""models.py — Shared data types for epubsaver."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chapter:
    index: int       # Caller-supplied, sorts the spine
    title: str       # Display title, e.g. "第一章 风起"
    filename: str    # Package-relative XHTML path, e.g. "chapter_1_3.xhtml"


@dataclass
class StyleSheet:
    index: int          # 0 is the global stylesheet
    filename: str       # e.g. "Styles/style0.css"
    map_name: str = ""  # Name given through create_css_map, if any


@dataclass
class BookMetadata:
    identifier: str                 # uuid4, fixed for the book's lifetime
    bookname: str | None = None
    author: str | None = None
    introduction: str | None = None
    language: str = "zh-CN"
    cover: bytes | None = None
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StagedResource:
    url: str     # External URL the bytes came from
    path: str    # Local path allocated for it
    data: bytes


@dataclass(frozen=True)
class Advisory:
    kind: str               # e.g. "image_fetch_failed"
    message: str
    url: str | None = None
