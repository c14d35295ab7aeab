# character_admin/cli.py
"""Entry points for the one-shot maintenance scripts (see scripts/)."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .errors import RecordStoreError
from .maintenance import ingest_directory, shorten_long_names, validate_content
from .records import RecordStore
from .settings import settings


def _store(args: argparse.Namespace) -> RecordStore:
    return RecordStore(
        args.content_dir,
        args.images_dir,
        webp_quality=settings.webp_quality,
        webp_method=settings.webp_method,
    )


def _parser(description: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=description)
    ap.add_argument("--content-dir", default=settings.content_dir, help="Character markdown folder")
    ap.add_argument("--images-dir", default=settings.images_dir, help="Published .webp folder")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return ap


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def process_images(argv: Optional[Sequence[str]] = None) -> int:
    ap = _parser("Convert raw images to .webp and create placeholder character markdown.")
    ap.add_argument("--raw-dir", default=settings.raw_images_dir, help="Folder scanned for raw images")
    ap.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    args = ap.parse_args(argv)
    _setup_logging(args.verbose)

    report = ingest_directory(_store(args), args.raw_dir, progress=not args.no_progress)
    if report.found == 0:
        print(f'No raw images found ("{args.raw_dir}" missing or empty). Skipping conversion.')
        return 0
    for failure in report.failed:
        print(f"[FAIL] {failure.source}: {failure.error}", file=sys.stderr)
    if not report.ok:
        print(f"\nImage processing finished with {len(report.failed)} failure(s).", file=sys.stderr)
        return 1
    print("Image processing complete.")
    return 0


def shorten_names(argv: Optional[Sequence[str]] = None) -> int:
    ap = _parser("Shorten overly long image filenames and keep their markdown in sync.")
    ap.add_argument("--threshold", type=int, default=settings.long_name_threshold)
    ap.add_argument("--max-tokens", type=int, default=settings.short_max_tokens)
    ap.add_argument("--max-length", type=int, default=settings.short_max_length)
    args = ap.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        results = shorten_long_names(_store(args), args.threshold, args.max_tokens, args.max_length)
    except RecordStoreError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1
    if not results:
        print("No long filenames to shorten.")
        return 0
    for r in results:
        if r.document_moved:
            print(f"Renamed {r.old}.webp -> {r.new}.webp and updated markdown.")
        elif r.document_kept:
            print(f"Renamed {r.old}.webp -> {r.new}.webp ({r.old}.md references another image; left as is).")
        else:
            print(f"Renamed {r.old}.webp -> {r.new}.webp (no markdown found for {r.old}).")
    return 0


def validate(argv: Optional[Sequence[str]] = None) -> int:
    ap = _parser("Validate character markdown frontmatter.")
    args = ap.parse_args(argv)
    _setup_logging(args.verbose)

    report = validate_content(_store(args))
    for issue in report.failures:
        print(f"[FAIL] {issue.filename}: {issue.message}", file=sys.stderr)
    for issue in report.warnings:
        print(f"[WARN] {issue.filename}: {issue.message}", file=sys.stderr)

    if not report.ok:
        print(f"\nValidation failed: {len(report.failures)} issue(s) found.", file=sys.stderr)
        return 1
    print("Validation passed.")
    return 0
