"""writers/nav.py — EPUB 3 navigation document (nav.xhtml)."""

from writers.base import XML_DECLARATION, by_index, escape_xml


def volume_href(volume) -> str:
    """First chapter's file, or the container page for an empty volume."""
    chapters = by_index(volume.chapters)
    return chapters[0].filename if chapters else volume.container_file


def generate_nav(volumes) -> str:
    items = []
    for volume in by_index(volumes):
        chapter_items = "\n".join(
            f'    <li><a href="{escape_xml(chapter.filename)}">{escape_xml(chapter.title)}</a></li>'
            for chapter in by_index(volume.chapters)
        )
        lines = [
            "<li>",
            f'  <a href="{escape_xml(volume_href(volume))}">{escape_xml(volume.title)}</a>',
        ]
        if chapter_items:
            lines += ["  <ol>", chapter_items, "  </ol>"]
        lines.append("</li>")
        items.append("\n".join(lines))

    toc = "\n".join(items)
    return (
        f"{XML_DECLARATION}\n"
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">\n'
        "<head>\n"
        "<title>Table of Contents</title>\n"
        "</head>\n"
        "<body>\n"
        '<nav epub:type="toc">\n'
        "<h1>Table of Contents</h1>\n"
        "<ol>\n"
        f"{toc}\n"
        "</ol>\n"
        "</nav>\n"
        "</body>\n"
        "</html>"
    )
