# character_admin/errors.py
from __future__ import annotations

from typing import Sequence


class RecordStoreError(Exception):
    """Base class for every failure surfaced by the record store."""


class NotFound(RecordStoreError):
    def __init__(self, slug: str):
        super().__init__(f"Character markdown not found: {slug}")
        self.slug = slug


class InvalidInput(RecordStoreError):
    pass


class SlugExhausted(InvalidInput):
    def __init__(self, candidate: str, limit: int):
        super().__init__(f"No free slug for '{candidate}' within {limit} suffixes")
        self.candidate = candidate
        self.limit = limit


class IOFailure(RecordStoreError):
    pass


class MalformedDocument(RecordStoreError):
    pass


class PartialRename(RecordStoreError):
    """
    The rename sequence stopped after it had already changed the filesystem.

    `completed` lists the steps that did happen (e.g. "moved image", "wrote document"),
    so an operator can finish or undo the rename by hand.
    """

    def __init__(self, original_slug: str, target_slug: str, completed: Sequence[str], cause: BaseException):
        done = ", ".join(completed) or "nothing"
        super().__init__(
            f"Rename {original_slug} -> {target_slug} interrupted after: {done} ({cause})"
        )
        self.original_slug = original_slug
        self.target_slug = target_slug
        self.completed = tuple(completed)
        self.cause = cause
