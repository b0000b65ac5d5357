"""writers/opf.py — Package document (content.opf): metadata, manifest, spine, guide."""

from models import BookMetadata
from writers.base import (
    COVER_IMAGE_FILE,
    COVER_PAGE_FILE,
    NAV_FILE,
    NCX_FILE,
    XML_DECLARATION,
    by_index,
    escape_xml,
    manifest_ids,
    media_type_for,
)

_FIXED_IDS = ("nav", "ncx", "cover", "cover-image")


def generate_opf(volumes, resource_paths: list[str], metadata: BookMetadata, modified: str) -> str:
    """
    Build content.opf.

    ``resource_paths`` is every path in the resource store, in registration
    order; ``modified`` is the dcterms:modified timestamp (UTC, seconds).
    With a cover, the cover image and page are expected to be among the
    registered resources already.
    """
    has_cover = metadata.cover is not None

    meta = [
        f'<dc:identifier id="BookId">urn:uuid:{escape_xml(metadata.identifier)}</dc:identifier>',
        f"<dc:title>{escape_xml(metadata.bookname or 'Untitled')}</dc:title>",
        f"<dc:creator>{escape_xml(metadata.author or 'Unknown')}</dc:creator>",
        f"<dc:description>{escape_xml(metadata.introduction or '')}</dc:description>",
        f"<dc:language>{escape_xml(metadata.language)}</dc:language>",
        f'<meta property="dcterms:modified">{modified}</meta>',
    ]
    if has_cover:
        meta += [
            '<meta name="cover" content="cover-image"/>',
            '<meta property="rendition:layout">pre-paginated</meta>',
        ]

    manifest = [
        f'<item id="nav" href="{NAV_FILE}" media-type="application/xhtml+xml" properties="nav"/>',
        f'<item id="ncx" href="{NCX_FILE}" media-type="application/x-dtbncx+xml"/>',
    ]
    if has_cover:
        manifest += [
            f'<item id="cover-image" href="{COVER_IMAGE_FILE}" media-type="image/jpeg" properties="cover-image"/>',
            f'<item id="cover" href="{COVER_PAGE_FILE}" media-type="application/xhtml+xml"/>',
        ]

    listed = [
        path for path in resource_paths
        if not (has_cover and path in (COVER_IMAGE_FILE, COVER_PAGE_FILE))
    ]
    ids = manifest_ids(listed, taken=_FIXED_IDS)
    for path in listed:
        manifest.append(
            f'<item id="{ids[path]}" href="{escape_xml(path)}" media-type="{media_type_for(path)}"/>'
        )

    spine = ['<itemref idref="cover"/>'] if has_cover else []
    seen = set()
    for volume in by_index(volumes):
        for chapter in by_index(volume.chapters):
            # Chapters sharing a filename share one spine slot
            if chapter.filename in seen:
                continue
            seen.add(chapter.filename)
            spine.append(f'<itemref idref="{ids[chapter.filename]}"/>')

    guide = (
        "<guide>\n"
        f'<reference href="{COVER_PAGE_FILE}" type="cover" title="Cover"/>\n'
        "</guide>\n"
        if has_cover
        else ""
    )

    sep = "\n    "
    return (
        f"{XML_DECLARATION}\n"
        '<package xmlns="http://www.idpf.org/2007/opf" unique-identifier="BookId" version="3.0">\n'
        '<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        f"    {sep.join(meta)}\n"
        "</metadata>\n"
        "<manifest>\n"
        f"    {sep.join(manifest)}\n"
        "</manifest>\n"
        '<spine toc="ncx">\n'
        f"    {sep.join(spine)}\n"
        "</spine>\n"
        f"{guide}"
        "</package>"
    )
