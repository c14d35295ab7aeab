# tests/conftest.py
import sys
import os
from pathlib import Path

import pytest
from PIL import Image

# Ensure API key exists for tests before importing the app
os.environ.setdefault("API_KEY", "dev")

# Insert the project root (one level up) at the front of sys.path
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

from character_admin.records import RecordStore  # noqa: E402


@pytest.fixture
def content_dir(tmp_path):
    d = tmp_path / "src" / "content" / "characters"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def images_dir(tmp_path):
    d = tmp_path / "public" / "images"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def store(content_dir, images_dir):
    return RecordStore(content_dir, images_dir)


def write_png(path: Path, size=(8, 8), mode="RGB", color=(200, 30, 30)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, "PNG")
    return path


def write_webp(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (4, 4), (10, 20, 30)).save(path, "WEBP")
    return path


@pytest.fixture
def make_png():
    return write_png


@pytest.fixture
def make_webp():
    return write_webp
