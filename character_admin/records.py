# character_admin/records.py
"""
On-disk character records.

A record is one markdown document (`<content_dir>/<slug>.md`) plus at most one image
(`<images_dir>/<image_ref>.webp`). The directory listing *is* the index: every call
re-reads the filesystem, so `has_image` is always current.

Known limitation: nothing here is locked. Two concurrent rename/delete/ingest calls on
the same slug race each other (lost update, or a delete racing an existence check).
"""
from __future__ import annotations

import locale
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from PIL import Image

from . import frontmatter
from .errors import InvalidInput, IOFailure, MalformedDocument, NotFound, PartialRename
from .images import IMAGE_EXT, encode_webp
from .slugs import compose, namespace, normalize, uniquify

logger = logging.getLogger(__name__)

DOC_EXT = ".md"
IMAGE_KEY = "imageFileBase"
SLUG_FIELDS = ("race", "subrace", "name")

Header = Dict[str, Any]
Encoder = Callable[..., Path]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def placeholder_header(slug: str) -> Header:
    return {"name": "", "race": "", "tags": [], "projects": [], IMAGE_KEY: slug}


@dataclass
class Record:
    slug: str
    image_ref: str
    has_image: bool
    name: str = ""
    race: str = ""
    subrace: str = ""
    tags: List[Any] = field(default_factory=list)
    projects: List[Any] = field(default_factory=list)
    body: str = ""
    metadata: Header = field(default_factory=dict)

    @property
    def filename(self) -> str:
        return self.slug + DOC_EXT

    @property
    def sort_label(self) -> str:
        return self.name or self.slug


def _sort_key(record: Record) -> Tuple[str, str]:
    label = record.sort_label
    return locale.strxfrm(label.casefold()), label


class RecordStore:
    """CRUD over paired (markdown document, image) files that share a slug."""

    def __init__(
        self,
        content_dir: str | Path,
        images_dir: str | Path,
        encoder: Optional[Encoder] = None,
        webp_quality: int = 85,
        webp_method: int = 5,
    ):
        self.content_dir = Path(content_dir)
        self.images_dir = Path(images_dir)
        self.encoder = encoder or encode_webp
        self.webp_quality = webp_quality
        self.webp_method = webp_method

    # ------------------------------------------------------------------
    # Paths & existence
    # ------------------------------------------------------------------
    @staticmethod
    def _check_slug(slug: Optional[str], what: str = "base") -> str:
        slug = (slug or "").strip()
        if not slug:
            raise InvalidInput(f"{what} is required")
        if "/" in slug or "\\" in slug or slug in (".", ".."):
            raise InvalidInput(f"Invalid {what}: {slug!r}")
        return slug

    def doc_path(self, slug: str) -> Path:
        return self.content_dir / (slug + DOC_EXT)

    def image_path(self, slug: str) -> Path:
        return self.images_dir / (slug + IMAGE_EXT)

    def has_document(self, slug: str) -> bool:
        return self.doc_path(slug).is_file()

    def has_image(self, slug: str) -> bool:
        return self.image_path(slug).is_file()

    def slug_taken(self, slug: str) -> bool:
        return namespace(self.has_document, self.has_image)(slug)

    def image_slugs(self) -> List[str]:
        if not self.images_dir.is_dir():
            return []
        return sorted(p.stem for p in self.images_dir.glob("*" + IMAGE_EXT) if p.is_file())

    def _claim(self, candidate: str, own_doc: Optional[str], own_image: Optional[str]) -> str:
        """Uniquify `candidate` in the shared namespace, treating this record's own files as free."""
        if candidate == own_doc:
            return candidate

        def taken(slug: str) -> bool:
            if slug != own_doc and self.has_document(slug):
                return True
            return slug != own_image and self.has_image(slug)

        return uniquify(candidate, taken)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def _read(self, slug: str) -> Tuple[Header, str]:
        path = self.doc_path(slug)
        if not path.is_file():
            raise NotFound(slug)
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDocument(f"{path.name} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise IOFailure(f"Could not read {path}: {exc}") from exc
        return frontmatter.parse(raw, source=path.name)

    def _to_record(self, slug: str, header: Header, body: str) -> Record:
        image_ref = _text(header.get(IMAGE_KEY)) or slug
        return Record(
            slug=slug,
            image_ref=image_ref,
            has_image=self.has_image(image_ref),
            name=_text(header.get("name")),
            race=_text(header.get("race")),
            subrace=_text(header.get("subrace")),
            tags=_list(header.get("tags")),
            projects=_list(header.get("projects")),
            body=body,
            metadata=header,
        )

    def get(self, slug: str) -> Record:
        slug = self._check_slug(slug)
        header, body = self._read(slug)
        return self._to_record(slug, header, body)

    def list(self) -> List[Record]:
        """
        Every record in the content directory, sorted by display name (or slug).

        A malformed document aborts the whole listing with MalformedDocument.
        """
        if not self.content_dir.is_dir():
            return []
        try:
            paths = sorted(p for p in self.content_dir.glob("*" + DOC_EXT) if p.is_file())
        except OSError as exc:
            raise IOFailure(f"Could not list {self.content_dir}: {exc}") from exc
        records = []
        for path in paths:
            header, body = self._read(path.stem)
            records.append(self._to_record(path.stem, header, body))
        records.sort(key=_sort_key)
        return records

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def _write(self, slug: str, header: Header, body: str = "") -> None:
        self.content_dir.mkdir(parents=True, exist_ok=True)
        self.doc_path(slug).write_text(frontmatter.serialize(header, body), encoding="utf-8")

    def _move_image(self, old: str, new: str) -> None:
        src, dest = self.image_path(old), self.image_path(new)
        if dest.exists():
            raise FileExistsError(f"Refusing to overwrite existing image {dest}")
        src.rename(dest)

    def create(self, fields: Mapping[str, Any], desired_slug: Optional[str] = None) -> str:
        """Write a new document; the slug comes from `desired_slug` or race/subrace/name."""
        if desired_slug and desired_slug.strip():
            candidate = normalize(desired_slug)
        else:
            candidate = compose(*(_text(fields.get(k)) for k in SLUG_FIELDS))
        if not candidate:
            raise InvalidInput("name, race or slug is required")

        slug = uniquify(candidate, self.slug_taken)
        header = placeholder_header(slug)
        for key, value in fields.items():
            if value is not None and key != IMAGE_KEY:
                header[key] = value
        try:
            self._write(slug, header)
        except OSError as exc:
            raise IOFailure(f"Could not write {self.doc_path(slug)}: {exc}") from exc
        logger.info(f"Created character {slug}")
        return slug

    def update(self, original_slug: str, fields: Mapping[str, Any]) -> str:
        """
        Apply admin edits: the new slug follows the race/subrace/name convention,
        using stored values for fields the caller did not send.
        """
        original_slug = self._check_slug(original_slug, "originalBase")
        header, body = self._read(original_slug)
        parts = [
            fields[k] if isinstance(fields.get(k), str) else _text(header.get(k))
            for k in SLUG_FIELDS
        ]
        return self._rename_loaded(original_slug, header, body, fields, compose(*parts) or None)

    def rename(
        self,
        original_slug: str,
        fields: Optional[Mapping[str, Any]] = None,
        desired_slug: Optional[str] = None,
    ) -> str:
        """
        Merge `fields` into the document and move it (and its image) to `desired_slug`.

        The desired slug is normalized and made unique against documents and images;
        a blank one keeps the record where it is. Returns the slug the record ended up at.
        """
        original_slug = self._check_slug(original_slug, "originalBase")
        header, body = self._read(original_slug)
        candidate = None
        if desired_slug and desired_slug.strip():
            candidate = normalize(desired_slug) or None
        return self._rename_loaded(original_slug, header, body, fields or {}, candidate)

    def relocate(self, slug: str, candidate: str) -> str:
        """Like rename, but `candidate` is used as given (no normalization, no field edits)."""
        slug = self._check_slug(slug)
        header, body = self._read(slug)
        return self._rename_loaded(slug, header, body, {}, self._check_slug(candidate))

    def _rename_loaded(
        self,
        original_slug: str,
        header: Header,
        body: str,
        fields: Mapping[str, Any],
        candidate: Optional[str],
    ) -> str:
        old_image_ref = _text(header.get(IMAGE_KEY)) or original_slug
        target = original_slug
        if candidate:
            target = self._claim(candidate, original_slug, old_image_ref)

        for key, value in fields.items():
            if key != IMAGE_KEY and isinstance(value, (str, list)):
                header[key] = value
        header[IMAGE_KEY] = target

        # Image first, then the new document, then drop the old one.
        completed: List[str] = []
        try:
            if target != old_image_ref and self.has_image(old_image_ref):
                self._move_image(old_image_ref, target)
                completed.append(f"moved image {old_image_ref}{IMAGE_EXT} -> {target}{IMAGE_EXT}")
            self._write(target, header, body)
            completed.append(f"wrote {target}{DOC_EXT}")
            if target != original_slug:
                self.doc_path(original_slug).unlink()
                completed.append(f"removed {original_slug}{DOC_EXT}")
        except OSError as exc:
            if completed:
                raise PartialRename(original_slug, target, completed, exc) from exc
            raise IOFailure(f"Could not update {original_slug}: {exc}") from exc

        if target != original_slug:
            logger.info(f"Renamed character {original_slug} -> {target}")
        return target

    def move_image(self, slug: str, candidate: str) -> str:
        """Move an image that has no document of its own; returns the slug it landed on."""
        slug = self._check_slug(slug)
        target = self._claim(self._check_slug(candidate), None, slug)
        if target == slug:
            return slug
        try:
            self._move_image(slug, target)
        except OSError as exc:
            raise IOFailure(f"Could not move image {slug} -> {target}: {exc}") from exc
        return target

    def delete(self, slug: str) -> None:
        """Remove the document and the image stored under `slug`; missing parts are fine."""
        slug = self._check_slug(slug)
        for path in (self.doc_path(slug), self.image_path(slug)):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise IOFailure(f"Could not delete {path}: {exc}") from exc
        logger.info(f"Deleted character {slug}")

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    def ingest(self, source: str | Path, taken: Optional[Set[str]] = None) -> str:
        """
        Convert one raw image into the store and make sure a document exists for it.

        The slug comes from the file name and is made unique against existing images
        and anything already in `taken` (slugs claimed earlier in the same batch).
        An existing document at that slug is never overwritten.
        """
        source = Path(source)
        base = normalize(source.stem)
        if not base:
            raise InvalidInput(f"Cannot derive a slug from '{source.name}'")

        claimed = taken if taken is not None else set()
        slug = uniquify(base, namespace(claimed.__contains__, self.has_image))
        try:
            self.encoder(
                source,
                self.image_path(slug),
                quality=self.webp_quality,
                method=self.webp_method,
            )
            claimed.add(slug)
            if not self.has_document(slug):
                self._write(slug, placeholder_header(slug))
        except OSError as exc:
            raise IOFailure(f"Could not ingest {source}: {exc}") from exc
        except (Image.DecompressionBombError, ValueError) as exc:
            raise IOFailure(f"Could not convert {source}: {exc}") from exc
        return slug
