"""writers/pages.py — Fixed-shape XHTML pages: chapters, volume containers, cover."""

from writers.base import COVER_IMAGE_FILE, XML_DECLARATION, escape_xml

_VIEWPORT = "width=device-width, height=device-height, initial-scale=1.0"


def chapter_xhtml(title: str, body: str, stylesheets: list[str]) -> str:
    """Wrap normalized body HTML in a chapter page linking ``stylesheets`` in order."""
    links = "\n".join(
        f'<link href="{escape_xml(href)}" rel="stylesheet"/>' for href in stylesheets
    )
    return (
        f"{XML_DECLARATION}\n"
        "<!DOCTYPE html>\n"
        '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        "<head>\n"
        f'<meta name="viewport" content="{_VIEWPORT}"/>\n'
        f"<title>{escape_xml(title)}</title>\n"
        f"{links}\n"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        "</body>\n"
        "</html>"
    )


def volume_xhtml(title: str) -> str:
    title = escape_xml(title)
    return (
        f"{XML_DECLARATION}\n"
        "<!DOCTYPE html>\n"
        '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        "<head>\n"
        f"<title>{title}</title>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{title}</h1>\n"
        "</body>\n"
        "</html>"
    )


def cover_xhtml() -> str:
    return (
        f"{XML_DECLARATION}\n"
        "<!DOCTYPE html>\n"
        '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        "<head>\n"
        f'<meta name="viewport" content="{_VIEWPORT}, minimum-scale=1.0"/>\n'
        "<title>Cover</title>\n"
        "</head>\n"
        "<body>\n"
        '<div style="text-align: center; padding: 0pt; margin: 0pt;">\n'
        f'<img src="{COVER_IMAGE_FILE}" alt="Cover Image" style="height: 100%; max-width: 100%;"/>\n'
        "</div>\n"
        "</body>\n"
        "</html>"
    )
