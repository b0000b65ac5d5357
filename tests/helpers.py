"""Shared test data and helpers."""

import io
import zipfile
from datetime import datetime, timezone
from xml.etree import ElementTree as ET

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 45, tzinfo=timezone.utc)

TINY_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
TINY_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16
TINY_GIF = b"GIF89a" + b"\x00" * 16

OPF_NS = "{http://www.idpf.org/2007/opf}"
NCX_NS = "{http://www.daisy.org/z3986/2005/ncx/}"
XHTML_NS = "{http://www.w3.org/1999/xhtml}"


def read_zip(data: bytes) -> dict[str, bytes]:
    """Unpack an archive into {name: bytes}, keeping entry order."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def parse_xml(data: bytes | str) -> ET.Element:
    """Parse a generated document; fails the test if it is not well-formed."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return ET.fromstring(data)
