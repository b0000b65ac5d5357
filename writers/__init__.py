"""writers/ — Generators for the package, navigation and page documents."""

from writers.base import escape_xml
from writers.nav import generate_nav
from writers.ncx import generate_ncx
from writers.opf import generate_opf
from writers.pages import chapter_xhtml, cover_xhtml, volume_xhtml

__all__ = [
    "chapter_xhtml",
    "cover_xhtml",
    "escape_xml",
    "generate_nav",
    "generate_ncx",
    "generate_opf",
    "volume_xhtml",
]
