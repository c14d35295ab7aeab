# scripts/process_images.py
# Convert raw images to .webp and create placeholder markdown.
# Usage: python scripts/process_images.py --help
from __future__ import annotations
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from character_admin.cli import process_images  # noqa: E402

if __name__ == "__main__":
    sys.exit(process_images())
