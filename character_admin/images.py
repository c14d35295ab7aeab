# character_admin/images.py
from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

ALLOWED_EXT = {".jpg", ".jpeg", ".png", ".webp"}
IMAGE_EXT = ".webp"


def is_source_image(path: Path) -> bool:
    return path.suffix.lower() in ALLOWED_EXT


def encode_webp(source: Path, dest: Path, quality: int = 85, method: int = 5) -> Path:
    """
    Re-encode any Pillow-readable image as WebP at `dest`.

    Palette and other exotic modes are converted first (WebP only takes RGB/RGBA);
    transparency survives as RGBA. Pillow errors (OSError) propagate to the caller.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    with Image.open(source) as img:
        if img.mode not in ("RGB", "RGBA"):
            has_alpha = img.mode in ("RGBA", "LA", "PA") or (
                img.mode == "P" and "transparency" in img.info
            )
            img = img.convert("RGBA" if has_alpha else "RGB")
        img.save(dest, "WEBP", quality=quality, method=method)
    logger.info(f"Converted '{source.name}' to '{dest.name}'")
    return dest
