"""archive.py — Assemble the OCF zip container from generated documents and resources."""

import io
import zipfile
from typing import Iterable

MIMETYPE = "application/epub+zip"
CONTENT_DIR = "OEBPS"

CONTAINER_XML = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
<rootfiles>
<rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
</rootfiles>
</container>"""


def build_archive(
    opf: str,
    ncx: str,
    nav: str,
    resources: Iterable[tuple[str, bytes]],
) -> bytes:
    """
    Write the container in reading-system order: the uncompressed mimetype
    first, then the container locator, package document, navigation map,
    every resource and finally the navigation document. Everything except
    the mimetype is deflated. zipfile errors propagate.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(zipfile.ZipInfo("mimetype"), MIMETYPE, compress_type=zipfile.ZIP_STORED)
        zf.writestr("META-INF/container.xml", CONTAINER_XML)
        zf.writestr(f"{CONTENT_DIR}/content.opf", opf)
        zf.writestr(f"{CONTENT_DIR}/toc.ncx", ncx)
        for path, data in resources:
            zf.writestr(f"{CONTENT_DIR}/{path}", data)
        zf.writestr(f"{CONTENT_DIR}/nav.xhtml", nav)
    return buffer.getvalue()
