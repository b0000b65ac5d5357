#!/usr/bin/env python3
"""
epubsaver — Assemble an EPUB from volumes and chapters of HTML fragments.

The book is described by a JSON manifest; images and stylesheet resources
referenced by the fragments are downloaded and packed into the EPUB.

Quick start:
  1. Describe the book in book.json (see below)
  2. python epubsaver.py book.json --dry-run
  3. python epubsaver.py book.json --output ~/Desktop/book.epub

Manifest shape:
  {
    "info": {"bookname": "...", "author": "...", "introduction": "...",
             "cover": "https://... or path/to/cover.jpg"},
    "stylesheets": [{"index": 0, "content": "p { ... }"},
                    {"index": 2, "url": "https://.../extra.css"},
                    {"index": 3, "file": "styles/poem.css", "map_name": "poem"}],
    "css_map": {"notes.css": "aside { ... }"},
    "volumes": [{"title": "Volume 1", "index": 1, "chapters": [
        {"index": 1, "title": "Chapter 1", "file": "ch1.html",
         "content_type": "html", "css_list": [2, "notes.css"]}]}]
  }
Relative "file" paths are resolved against the manifest's directory.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Assemble an EPUB from a JSON manifest of volumes and HTML chapters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dry run — list volumes and chapters, no downloads:
  python epubsaver.py book.json --dry-run

  # Build to a specific location:
  python epubsaver.py book.json --output ~/Desktop/novel.epub

  # Page was served over https, so upgrade http:// images:
  python epubsaver.py book.json --secure-context
        """,
    )
    parser.add_argument("manifest", type=Path, help="Path to the JSON book manifest")
    parser.add_argument(
        "--output", type=Path, default=None, metavar="PATH",
        help="Output file path (default: output/<bookname>.epub)",
    )
    parser.add_argument(
        "--secure-context", action="store_true", default=None,
        help="Upgrade http:// image URLs to https:// before fetching",
    )
    parser.add_argument(
        "--json-logs", action="store_true", default=False,
        help="Emit structured JSON logs instead of console logs",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate the manifest and list its contents without downloading anything",
    )
    return parser.parse_args(argv)


def _read_file(base_dir: Path, name: str) -> Path:
    path = (base_dir / name).resolve()
    if not path.exists():
        raise FileNotFoundError(f"File referenced by manifest not found: {path}")
    return path


def load_manifest(manifest_path: Path) -> dict:
    """
    Read and validate a book manifest. Inline "file" references are read
    so the returned dict only carries content, URLs and bytes.
    """
    from content import CONTENT_TYPES

    manifest_path = Path(manifest_path)
    base_dir = manifest_path.parent
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Manifest must be a JSON object")

    info = dict(data.get("info") or {})
    cover = info.get("cover")
    if isinstance(cover, str) and not cover.lower().startswith(("http://", "https://")):
        info["cover"] = _read_file(base_dir, cover).read_bytes()

    stylesheets = []
    for n, sheet in enumerate(data.get("stylesheets") or [], start=1):
        if "index" not in sheet:
            raise ValueError(f"Stylesheet #{n} has no 'index'")
        if "file" in sheet:
            content = _read_file(base_dir, sheet["file"]).read_text(encoding="utf-8")
        elif "url" in sheet:
            content = sheet["url"]
        elif "content" in sheet:
            content = sheet["content"]
        else:
            raise ValueError(f"Stylesheet #{n} needs one of 'content', 'url' or 'file'")
        stylesheets.append({
            "index": int(sheet["index"]),
            "content": content,
            "filename": sheet.get("filename"),
            "map_name": sheet.get("map_name", ""),
        })

    volumes = []
    for vol in data.get("volumes") or []:
        if "title" not in vol or "index" not in vol:
            raise ValueError("Every volume needs a 'title' and an 'index'")
        chapters = []
        for ch in vol.get("chapters") or []:
            if "index" not in ch or "title" not in ch:
                raise ValueError(f"Chapter in volume '{vol['title']}' needs an 'index' and a 'title'")
            if "file" in ch:
                content = _read_file(base_dir, ch["file"]).read_text(encoding="utf-8")
            elif "content" in ch:
                content = ch["content"]
            else:
                raise ValueError(f"Chapter '{ch['title']}' needs 'content' or 'file'")
            content_type = ch.get("content_type", "html")
            if content_type not in CONTENT_TYPES:
                raise ValueError(
                    f"Chapter '{ch['title']}': unsupported content_type '{content_type}'. "
                    f"Supported: {', '.join(CONTENT_TYPES)}"
                )
            chapters.append({
                "index": int(ch["index"]),
                "title": ch["title"],
                "content": content,
                "content_type": content_type,
                "insert_title": bool(ch.get("insert_title", True)),
                "use_global_css": bool(ch.get("use_global_css", True)),
                "css_list": list(ch.get("css_list") or []),
            })
        volumes.append({"title": vol["title"], "index": int(vol["index"]), "chapters": chapters})

    return {
        "info": info,
        "stylesheets": stylesheets,
        "css_map": dict(data.get("css_map") or {}),
        "volumes": volumes,
    }


def print_outline(manifest: dict) -> None:
    info = manifest["info"]
    print(f"Title:  {info.get('bookname', 'Untitled')}")
    print(f"Author: {info.get('author', 'Unknown')}")
    print(f"Stylesheets: {len(manifest['stylesheets']) + len(manifest['css_map'])}")
    total = sum(len(v["chapters"]) for v in manifest["volumes"])
    print(f"\nFound {len(manifest['volumes'])} volumes, {total} chapters:")
    print("-" * 70)
    for vol in sorted(manifest["volumes"], key=lambda v: v["index"]):
        print(f"  [{vol['index']:>3}] {vol['title']}")
        for ch in sorted(vol["chapters"], key=lambda c: c["index"]):
            print(f"        {ch['index']:>4}. {ch['title']:<50} {len(ch['content']):>7} chars")
    print("-" * 70)
    print()


def _resolve_css_list(book, css_list: list) -> list[int]:
    """Map names given in css_list to stylesheet indices; unknown names are dropped."""
    indices = []
    for entry in css_list:
        if isinstance(entry, str):
            index = book.css_index(entry)
            if index is None:
                print(f"  WARNING: unknown stylesheet name '{entry}', skipped")
                continue
            indices.append(index)
        else:
            indices.append(int(entry))
    return indices


async def populate_book(book, manifest: dict, show_progress: bool = True) -> None:
    """Feed a loaded manifest into ``book``: metadata, stylesheets, then chapters."""
    from tqdm import tqdm

    for tag, value in manifest["info"].items():
        await book.set_info(tag, value)

    for sheet in manifest["stylesheets"]:
        await book.add_css(sheet["index"], sheet["content"], sheet["filename"], sheet["map_name"])
    if manifest["css_map"]:
        await book.create_css_map(manifest["css_map"])

    total = sum(len(v["chapters"]) for v in manifest["volumes"])
    with tqdm(total=total, desc="  Chapters", unit="ch", disable=not show_progress) as pbar:
        for vol in manifest["volumes"]:
            volume = book.add_volume(vol["title"], vol["index"])
            for ch in vol["chapters"]:
                await volume.add_chapter(
                    ch["index"],
                    ch["content"],
                    ch["title"],
                    ch["content_type"],
                    insert_title=ch["insert_title"],
                    use_global_css=ch["use_global_css"],
                    css_list=_resolve_css_list(book, ch["css_list"]),
                )
                pbar.update(1)


async def build(manifest: dict, settings, output_path: Path):
    from book import EpubBook

    async with EpubBook(settings=settings) as book:
        await populate_book(book, manifest)
        print(f"  Writing EPUB: {output_path}")
        book.save(output_path)
    return book


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    load_dotenv()

    # Lazy imports keep --help fast
    from config import load_settings
    from log_config import configure_logging

    settings = load_settings()
    if args.secure_context is not None:
        settings.secure_context = args.secure_context
    configure_logging(json_format=args.json_logs or settings.log_format == "json")

    print(f"Reading manifest: {args.manifest}")
    try:
        manifest = load_manifest(args.manifest)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_outline(manifest)

    if args.dry_run:
        print("Dry run complete. Nothing downloaded.")
        return

    bookname = str(manifest["info"].get("bookname") or "Untitled")
    safe_name = bookname.replace(" ", "_").replace("/", "_")
    output_file = args.output or Path("output") / f"{safe_name}.epub"

    book = asyncio.run(build(manifest, settings, output_file))

    size_kb = output_file.stat().st_size // 1024
    print(f"\nDone! EPUB saved to: {output_file}  ({size_kb} KB, {len(book.store)} resources)")
    if book.advisories:
        print(f"{len(book.advisories)} advisory message(s):")
        for advisory in book.advisories:
            print(f"  [{advisory.kind}] {advisory.url or ''} {advisory.message}")


if __name__ == "__main__":
    main()
