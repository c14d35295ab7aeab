# scripts/validate_content.py
# Validate character markdown frontmatter; exits 1 on failures.
# Usage: python scripts/validate_content.py --help
from __future__ import annotations
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from character_admin.cli import validate  # noqa: E402

if __name__ == "__main__":
    sys.exit(validate())
