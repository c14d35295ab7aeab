# tests/test_images.py
from pathlib import Path

import pytest
from PIL import Image

from character_admin.images import encode_webp, is_source_image


@pytest.mark.parametrize("name,expected", [
    ("a.png", True), ("a.JPG", True), ("a.jpeg", True), ("a.webp", True),
    ("a.gif", False), ("a.md", False), ("noext", False),
])
def test_is_source_image(name, expected):
    assert is_source_image(Path(name)) is expected


@pytest.mark.parametrize("mode,color,expected_mode", [
    ("RGB", (1, 2, 3), "RGB"),
    ("RGBA", (1, 2, 3, 128), "RGBA"),
    ("L", 128, "RGB"),
    ("LA", (128, 100), "RGBA"),
])
def test_encode_webp_modes(tmp_path, mode, color, expected_mode):
    src = tmp_path / f"src_{mode}.png"
    Image.new(mode, (6, 6), color).save(src, "PNG")
    dest = encode_webp(src, tmp_path / "out" / "x.webp", quality=80, method=4)
    with Image.open(dest) as img:
        assert img.format == "WEBP"
        assert img.mode == expected_mode
        assert img.size == (6, 6)


def test_encode_webp_palette_with_transparency(tmp_path):
    src = tmp_path / "p.png"
    img = Image.new("P", (4, 4), 0)
    img.info["transparency"] = 0
    img.save(src, "PNG", transparency=0)
    with Image.open(encode_webp(src, tmp_path / "p.webp")) as out:
        assert out.mode == "RGBA"


def test_encode_webp_rejects_garbage(tmp_path):
    src = tmp_path / "junk.png"
    src.write_bytes(b"nope")
    with pytest.raises(OSError):
        encode_webp(src, tmp_path / "junk.webp")
