# scripts/shorten_names.py
# Shorten long image filenames, keeping markdown in sync.
# Usage: python scripts/shorten_names.py --help
from __future__ import annotations
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from character_admin.cli import shorten_names  # noqa: E402

if __name__ == "__main__":
    sys.exit(shorten_names())
