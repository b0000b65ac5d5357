"""writers/ncx.py — Legacy navigation map (toc.ncx) with play-order sequencing."""

from writers.base import XML_DECLARATION, by_index, escape_xml


def _nav_point(play_order: int, label: str, src: str, indent: str) -> str:
    return (
        f'{indent}<navPoint id="navpoint-{play_order}" playOrder="{play_order}">\n'
        f"{indent}  <navLabel><text>{escape_xml(label)}</text></navLabel>\n"
        f'{indent}  <content src="{escape_xml(src)}"/>'
    )


def generate_ncx(volumes, identifier: str, bookname: str | None) -> str:
    """
    One navPoint per volume (targeting its container page) with a nested
    navPoint per chapter. playOrder counts up across the whole traversal.
    """
    play_order = 1
    nav_points = []

    for volume in by_index(volumes):
        lines = [_nav_point(play_order, volume.title, volume.container_file, "")]
        play_order += 1
        for chapter in by_index(volume.chapters):
            lines.append(_nav_point(play_order, chapter.title, chapter.filename, "  "))
            lines.append("  </navPoint>")
            play_order += 1
        lines.append("</navPoint>")
        nav_points.append("\n".join(lines))

    nav_map = "\n".join(nav_points)
    return (
        f"{XML_DECLARATION}\n"
        '<!DOCTYPE ncx PUBLIC "-//NISO//DTD ncx 2005-1//EN" '
        '"http://www.daisy.org/z3986/2005/ncx-2005-1.dtd">\n'
        '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">\n'
        "<head>\n"
        f'<meta name="dtb:uid" content="urn:uuid:{escape_xml(identifier)}"/>\n'
        '<meta name="dtb:depth" content="2"/>\n'
        '<meta name="dtb:totalPageCount" content="0"/>\n'
        '<meta name="dtb:maxPageNumber" content="0"/>\n'
        "</head>\n"
        "<docTitle>\n"
        f"<text>{escape_xml(bookname or 'Untitled')}</text>\n"
        "</docTitle>\n"
        "<navMap>\n"
        f"{nav_map}\n"
        "</navMap>\n"
        "</ncx>"
    )
