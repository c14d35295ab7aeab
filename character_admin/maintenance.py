# character_admin/maintenance.py
"""Batch jobs over the record store: raw image ingestion, long-name shortening, validation."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Set

from PIL import Image, UnidentifiedImageError
from tqdm import tqdm

from . import frontmatter
from .errors import InvalidInput, IOFailure, MalformedDocument
from .images import IMAGE_EXT, is_source_image
from .metrics import character_image_ingest_failures_total, character_images_ingested_total
from .records import DOC_EXT, IMAGE_KEY, RecordStore
from .slugs import shorten

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Ingestion
# ------------------------------------------------------------------------------
@dataclass
class IngestFailure:
    source: str
    reason: str
    error: str


@dataclass
class IngestReport:
    found: int = 0
    ingested: List[str] = field(default_factory=list)
    failed: List[IngestFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def find_files(base: Path) -> List[Path]:
    """All files under `base`, recursively; a missing directory is simply empty."""
    if not base.is_dir():
        return []
    files: List[Path] = []
    for root, _, names in os.walk(base):
        for name in sorted(names):
            files.append(Path(root) / name)
    return sorted(files)


def _failure_reason(exc: Exception) -> str:
    if isinstance(exc, InvalidInput):
        return "invalid_name"
    if isinstance(exc.__cause__, Image.DecompressionBombError):
        return "too_large"
    if isinstance(exc.__cause__, UnidentifiedImageError):
        return "decode"
    return "io"


def ingest_directory(store: RecordStore, raw_dir: str | Path, progress: bool = False) -> IngestReport:
    """
    Ingest every supported image below `raw_dir`.

    One bad image never stops the batch: its failure is logged and recorded in the report.
    Slugs claimed earlier in the run count as taken for the later images.
    """
    files = find_files(Path(raw_dir))
    images = [p for p in files if is_source_image(p)]
    report = IngestReport(found=len(files))

    taken: Set[str] = set()
    for src in tqdm(images, desc="Converting", unit="img", disable=not progress):
        try:
            slug = store.ingest(src, taken)
        except (InvalidInput, IOFailure) as e:
            reason = _failure_reason(e)
            logger.warning(f"Skipping {src}: {e}")
            character_image_ingest_failures_total.labels(reason=reason).inc()
            report.failed.append(IngestFailure(source=str(src), reason=reason, error=str(e)))
            continue
        character_images_ingested_total.inc()
        report.ingested.append(slug)

    logger.info(
        f"Ingest complete: {len(report.ingested)} images converted, "
        f"{len(report.failed)} failed, {len(files) - len(images)} non-image files ignored."
    )
    return report


# ------------------------------------------------------------------------------
# Long filename shortening
# ------------------------------------------------------------------------------
@dataclass
class ShortenResult:
    old: str
    new: str
    document_moved: bool
    document_kept: bool = False


def shorten_long_names(
    store: RecordStore,
    threshold: int = 70,
    max_tokens: int = 6,
    max_length: int = 40,
) -> List[ShortenResult]:
    """
    Shorten image slugs whose filename is longer than `threshold` characters.

    A document stored under the same slug moves with its image; an image without one
    is moved on its own (with a warning). So is an image whose document points at
    another image; that document stays where it is.
    """
    long_names = [s for s in store.image_slugs() if len(s + IMAGE_EXT) > threshold]
    results: List[ShortenResult] = []
    for base in long_names:
        short = shorten(base, max_tokens, max_length)
        if not short or short == base:
            continue
        if store.has_document(base) and store.get(base).image_ref == base:
            new = store.relocate(base, short)
            results.append(ShortenResult(old=base, new=new, document_moved=True))
        else:
            new = store.move_image(base, short)
            document_kept = store.has_document(base)
            if document_kept:
                logger.warning(f"Markdown for {base} references a different image; moved image only.")
            else:
                logger.warning(f"Markdown file for {base} not found.")
            results.append(ShortenResult(old=base, new=new, document_moved=False, document_kept=document_kept))
    return results


# ------------------------------------------------------------------------------
# Content validation
# ------------------------------------------------------------------------------
REQUIRED = (IMAGE_KEY,)
MIN_NAME_LENGTH = 3


@dataclass
class Issue:
    filename: str
    message: str


@dataclass
class ValidationReport:
    checked: int = 0
    failures: List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, list) and not value:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def validate_content(store: RecordStore) -> ValidationReport:
    """Check every document's frontmatter; failures are errors, warnings are advice."""
    report = ValidationReport()
    if not store.content_dir.is_dir():
        return report

    for path in sorted(store.content_dir.glob("*" + DOC_EXT)):
        f = path.name
        report.checked += 1
        try:
            data, _ = frontmatter.parse(path.read_text(encoding="utf-8"), source=f)
        except (MalformedDocument, UnicodeDecodeError, OSError) as e:
            report.failures.append(Issue(f, f"could not be parsed ({e})"))
            continue

        for key in REQUIRED:
            if is_empty_value(data.get(key)):
                report.failures.append(Issue(f, f"missing required field '{key}'"))

        image_ref = data.get(IMAGE_KEY)
        base = path.stem
        if not is_empty_value(image_ref) and image_ref != base:
            report.failures.append(
                Issue(f, f"{IMAGE_KEY} ({image_ref}) does not match filename base ({base})")
            )

        name = data.get("name")
        if isinstance(name, str) and not is_empty_value(name) and len(name) < MIN_NAME_LENGTH:
            report.warnings.append(Issue(f, "name is very short, consider expanding."))

        tags = data.get("tags")
        if isinstance(tags, list) and any(isinstance(t, str) and " " in t for t in tags):
            report.warnings.append(Issue(f, "tags contain spaces; consider kebab-case tokens."))

        if isinstance(image_ref, str) and image_ref and not store.has_image(image_ref):
            report.warnings.append(Issue(f, f"image {image_ref}{IMAGE_EXT} not found."))

    return report
