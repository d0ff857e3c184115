# bulk_render.py
"""Render a folder of JSON documents to PDF files."""
import argparse
import json
import logging
from pathlib import Path

from config import Config
from documents import DocumentData
from formatting import Formatter
from page_stream import PageGeometry
from pdf_service import document_filename, render


def _load_template(path: str):
    if not path:
        return None
    # resolve() falls back to defaults for unreadable JSON
    return Path(path).read_text(encoding="utf-8")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render a folder of JSON estimates/invoices to PDF.")
    parser.add_argument("input_dir", help="Folder containing *.json document payloads.")
    parser.add_argument("--template", default="", help="Template config JSON file applied to every document.")
    parser.add_argument("--out", default=Config.EXPORTS_DIR, help="Output folder (default: EXPORTS_DIR).")
    parser.add_argument("--locale", default=Config.DOCUMENT_LOCALE, help="e.g. en-US, es-MX")
    parser.add_argument("--currency", default=Config.DOCUMENT_CURRENCY, help="ISO code, e.g. USD")
    parser.add_argument("--all", action="store_true", help="Re-render even if the PDF already exists.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=Config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    src = Path(args.input_dir)
    if not src.is_dir():
        raise SystemExit(f"Not a folder: {src}")

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    template = _load_template(args.template)
    fmt = Formatter(locale=args.locale, currency=args.currency)
    geometry = PageGeometry.for_page_size(Config.PAGE_SIZE)

    files = sorted(src.glob("*.json"))
    if not files:
        print("No documents found in the given folder.")
        return 0

    total = len(files)
    done = 0
    warned = 0
    skipped = 0
    failed = 0

    for i, path in enumerate(files, start=1):
        try:
            data = DocumentData.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            failed += 1
            print(f"[{i}/{total}] FAIL  {path.name}  ({e})")
            continue

        target = out_dir / document_filename(data.kind, data.number, fmt.translator)
        if target.exists() and not args.all:
            skipped += 1
            print(f"[{i}/{total}] SKIP  {path.name} (already rendered)")
            continue

        result = render(data, template, formatter=fmt, geometry=geometry)
        if not result.ok:
            failed += 1
            print(f"[{i}/{total}] FAIL  {path.name}  ({'; '.join(result.errors)})")
            continue

        target.write_bytes(result.pdf_bytes)
        if result.warnings:
            warned += 1
            print(f"[{i}/{total}] WARN  {path.name} -> {target}  ({'; '.join(map(str, result.warnings))})")
        else:
            done += 1
            print(f"[{i}/{total}] DONE  {path.name} -> {target}")

    print("\nBulk render complete.")
    print(f"Rendered:  {done}")
    print(f"Warnings:  {warned}")
    print(f"Skipped:   {skipped}")
    print(f"Failed:    {failed}")
    print(f"Exports:   {out_dir}")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
