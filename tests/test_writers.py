"""Tests for the package document generators, called with plain stand-in volumes."""

from dataclasses import dataclass, field

import pytest

from models import BookMetadata, Chapter
from writers import chapter_xhtml, cover_xhtml, generate_nav, generate_ncx, generate_opf, volume_xhtml
from writers.base import escape_xml, manifest_id, manifest_ids, media_type_for
from tests.helpers import NCX_NS, OPF_NS, XHTML_NS, parse_xml


@dataclass
class FakeVolume:
    title: str
    index: int
    chapters: list = field(default_factory=list)

    @property
    def container_file(self):
        return f"volume_{self.index}.xhtml"


def make_volume(title, index, *chapters):
    volume = FakeVolume(title, index)
    for chapter_index, chapter_title in chapters:
        volume.chapters.append(
            Chapter(
                index=chapter_index,
                title=chapter_title,
                filename=f"chapter_{index}_{chapter_index}.xhtml",
            )
        )
    return volume


MODIFIED = "2024-03-01T12:30:45Z"


class TestEscaping:
    def test_all_five_characters(self):
        assert escape_xml("""<a href="x">Tom & Jerry's</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&apos;s&lt;/a&gt;"
        )

    def test_none_is_empty(self):
        assert escape_xml(None) == ""


class TestManifestIds:
    def test_unsafe_characters(self):
        assert manifest_id("images/img0.jpg") == "images-img0-jpg"
        assert manifest_id("Styles/style 1.css") == "Styles-style-1-css"

    def test_leading_digit_or_symbol(self):
        assert manifest_id("1.css") == "id-1-css"
        assert manifest_id("_x.css") == "id--x-css"

    def test_collisions_are_suffixed(self):
        ids = manifest_ids(["a.b", "a-b", "a_b"], taken=("a-b-2",))
        assert ids == {"a.b": "a-b", "a-b": "a-b-3", "a_b": "a-b-4"}

    def test_reserved_ids_are_avoided(self):
        assert manifest_ids(["nav"], taken=("nav",)) == {"nav": "nav-2"}


class TestMediaTypes:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("chapter_1_1.xhtml", "application/xhtml+xml"),
            ("Styles/style0.css", "text/css"),
            ("images/img0.JPG", "image/jpeg"),
            ("images/img1.jpeg", "image/jpeg"),
            ("images/img2.png", "image/png"),
            ("images/img3.webp", "image/webp"),
            ("resources/res0.woff2", "application/octet-stream"),
        ],
    )
    def test_by_suffix(self, path, expected):
        assert media_type_for(path) == expected


class TestPages:
    def test_chapter_links_in_given_order(self):
        page = chapter_xhtml("T", "<p>x</p>", ["Styles/style1.css", "Styles/style0.css"])
        root = parse_xml(page)
        hrefs = [link.get("href") for link in root.iter(f"{XHTML_NS}link")]
        assert hrefs == ["Styles/style1.css", "Styles/style0.css"]
        assert root.find(f"{XHTML_NS}body/{XHTML_NS}p").text == "x"

    def test_chapter_without_stylesheets(self):
        root = parse_xml(chapter_xhtml("T", "", []))
        assert list(root.iter(f"{XHTML_NS}link")) == []

    def test_volume_page(self):
        root = parse_xml(volume_xhtml("Book & <Part>"))
        assert root.find(f"{XHTML_NS}head/{XHTML_NS}title").text == "Book & <Part>"
        assert root.find(f"{XHTML_NS}body/{XHTML_NS}h1").text == "Book & <Part>"

    def test_cover_page(self):
        root = parse_xml(cover_xhtml())
        assert root.find(f".//{XHTML_NS}img").get("src") == "images/cover.jpg"


class TestNcx:
    def test_play_order_is_continuous(self):
        volumes = [
            make_volume("Two", 2, (1, "c")),
            make_volume("One", 1, (2, "b"), (1, "a")),
        ]

        root = parse_xml(generate_ncx(volumes, "abc", "Book"))

        points = [
            (p.get("playOrder"), p.find(f"{NCX_NS}navLabel/{NCX_NS}text").text)
            for p in root.iter(f"{NCX_NS}navPoint")
        ]
        assert points == [("1", "One"), ("2", "a"), ("3", "b"), ("4", "Two"), ("5", "c")]

    def test_chapters_nest_under_volumes(self):
        root = parse_xml(generate_ncx([make_volume("V", 1, (1, "a"))], "abc", "Book"))

        top = root.findall(f"{NCX_NS}navMap/{NCX_NS}navPoint")
        assert len(top) == 1
        nested = top[0].findall(f"{NCX_NS}navPoint")
        assert [p.find(f"{NCX_NS}content").get("src") for p in nested] == ["chapter_1_1.xhtml"]
        assert top[0].find(f"{NCX_NS}content").get("src") == "volume_1.xhtml"

    def test_head_metadata(self):
        root = parse_xml(generate_ncx([], "abc", None))

        meta = {m.get("name"): m.get("content") for m in root.iter(f"{NCX_NS}meta")}
        assert meta == {
            "dtb:uid": "urn:uuid:abc",
            "dtb:depth": "2",
            "dtb:totalPageCount": "0",
            "dtb:maxPageNumber": "0",
        }
        assert root.find(f"{NCX_NS}docTitle/{NCX_NS}text").text == "Untitled"


class TestNav:
    def test_volume_links_to_first_chapter(self):
        volumes = [make_volume("V", 1, (5, "late"), (2, "early"))]

        root = parse_xml(generate_nav(volumes))

        links = [(a.text, a.get("href")) for a in root.iter(f"{XHTML_NS}a")]
        assert links == [
            ("V", "chapter_1_2.xhtml"),
            ("early", "chapter_1_2.xhtml"),
            ("late", "chapter_1_5.xhtml"),
        ]

    def test_empty_volume_has_no_nested_list(self):
        root = parse_xml(generate_nav([make_volume("Empty", 4)]))

        item = root.find(f".//{XHTML_NS}nav/{XHTML_NS}ol/{XHTML_NS}li")
        assert item.find(f"{XHTML_NS}ol") is None
        assert item.find(f"{XHTML_NS}a").get("href") == "volume_4.xhtml"

    def test_toc_type(self):
        root = parse_xml(generate_nav([]))
        nav = root.find(f".//{XHTML_NS}nav")
        assert nav.get("{http://www.idpf.org/2007/ops}type") == "toc"


class TestOpf:
    def test_manifest_lists_every_resource_once(self):
        volume = make_volume("V", 1, (1, "a"))
        paths = ["volume_1.xhtml", "chapter_1_1.xhtml", "images/img0.png", "Styles/style0.css"]

        root = parse_xml(generate_opf([volume], paths, BookMetadata(identifier="abc"), MODIFIED))

        items = {i.get("href"): i for i in root.iter(f"{OPF_NS}item")}
        assert set(items) == {"nav.xhtml", "toc.ncx", *paths}
        assert items["nav.xhtml"].get("properties") == "nav"
        assert items["toc.ncx"].get("media-type") == "application/x-dtbncx+xml"
        assert items["images/img0.png"].get("media-type") == "image/png"
        ids = [i.get("id") for i in root.iter(f"{OPF_NS}item")]
        assert len(ids) == len(set(ids))

    def test_spine_skips_repeated_filenames(self):
        volume = make_volume("V", 1, (1, "a"))
        volume.chapters.append(Chapter(index=2, title="again", filename="chapter_1_1.xhtml"))

        root = parse_xml(
            generate_opf([volume], ["chapter_1_1.xhtml"], BookMetadata(identifier="abc"), MODIFIED)
        )

        assert [r.get("idref") for r in root.iter(f"{OPF_NS}itemref")] == ["chapter-1-1-xhtml"]

    def test_cover_entries(self):
        metadata = BookMetadata(identifier="abc", cover=b"\xff\xd8")
        paths = ["images/cover.jpg", "cover.xhtml"]

        root = parse_xml(generate_opf([], paths, metadata, MODIFIED))

        hrefs = [i.get("href") for i in root.iter(f"{OPF_NS}item")]
        assert hrefs.count("images/cover.jpg") == 1
        assert hrefs.count("cover.xhtml") == 1
        assert [r.get("idref") for r in root.iter(f"{OPF_NS}itemref")] == ["cover"]
        metas = {m.get("name"): m.get("content") for m in root.iter(f"{OPF_NS}meta") if m.get("name")}
        assert metas == {"cover": "cover-image"}
        layout = [m.text for m in root.iter(f"{OPF_NS}meta") if m.get("property") == "rendition:layout"]
        assert layout == ["pre-paginated"]
        assert root.find(f"{OPF_NS}guide/{OPF_NS}reference").get("type") == "cover"

    def test_modified_and_language(self):
        metadata = BookMetadata(identifier="abc", language="en")

        root = parse_xml(generate_opf([], [], metadata, MODIFIED))

        modified = [m.text for m in root.iter(f"{OPF_NS}meta") if m.get("property") == "dcterms:modified"]
        assert modified == [MODIFIED]
        assert root.find(".//{http://purl.org/dc/elements/1.1/}language").text == "en"
        assert root.get("unique-identifier") == "BookId"
