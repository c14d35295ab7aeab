# tests/test_maintenance.py
import logging

import pytest
from PIL import Image

from character_admin import cli, frontmatter
from character_admin.maintenance import (
    find_files,
    ingest_directory,
    is_empty_value,
    shorten_long_names,
    validate_content,
)


def write_doc(content_dir, slug, **header):
    (content_dir / f"{slug}.md").write_text(frontmatter.serialize(header), encoding="utf-8")


LONG = "a_very_long_character_name_that_goes_on_and_on_forever_and_ever_more"  # 68 chars


# --------------------------------------------------------------------
# 1) Raw image ingestion
# --------------------------------------------------------------------
def test_find_files_missing_dir(tmp_path):
    assert find_files(tmp_path / "Raw Images") == []


def test_ingest_directory_isolates_failures(store, content_dir, images_dir, make_png, tmp_path):
    raw = tmp_path / "Raw Images"
    make_png(raw / "Hero One.png")
    make_png(raw / "nested" / "hero_one.jpeg")
    make_png(raw / "!!!.png")
    (raw / "broken.png").write_bytes(b"junk")
    (raw / "readme.txt").write_text("not an image")

    report = ingest_directory(store, raw)

    assert report.found == 5
    assert sorted(report.ingested) == ["hero_one", "hero_one-1"]
    assert sorted(f.reason for f in report.failed) == ["decode", "invalid_name"]
    assert not report.ok
    assert (images_dir / "hero_one.webp").exists()
    assert (images_dir / "hero_one-1.webp").exists()
    assert (content_dir / "hero_one-1.md").exists()


def test_ingest_directory_rerun_does_not_clobber(store, content_dir, make_png, tmp_path):
    raw = tmp_path / "raw"
    make_png(raw / "grom.png")
    ingest_directory(store, raw)
    write_doc(content_dir, "grom", name="Grom the Edited", imageFileBase="grom")

    report = ingest_directory(store, raw)

    assert report.ingested == ["grom-1"]
    header, _ = frontmatter.parse((content_dir / "grom.md").read_text())
    assert header["name"] == "Grom the Edited"


def test_ingest_directory_survives_oversized_image(store, images_dir, make_png, tmp_path, monkeypatch):
    raw = tmp_path / "raw"
    make_png(raw / "big.png", size=(64, 64))
    make_png(raw / "ok.png")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    report = ingest_directory(store, raw)

    assert report.ingested == ["ok"]
    [failure] = report.failed
    assert failure.source.endswith("big.png")
    assert failure.reason == "too_large"
    assert not (images_dir / "big.webp").exists()


def test_process_images_cli(store, content_dir, images_dir, make_png, tmp_path, capsys):
    raw = tmp_path / "raw"
    make_png(raw / "Hero.png")
    args = ["--content-dir", str(content_dir), "--images-dir", str(images_dir), "--raw-dir", str(raw), "--no-progress"]
    assert cli.process_images(args) == 0
    assert "Image processing complete." in capsys.readouterr().out

    (raw / "bad.png").write_bytes(b"junk")
    assert cli.process_images(args) == 1
    assert "[FAIL]" in capsys.readouterr().err


def test_process_images_cli_empty(content_dir, images_dir, tmp_path, capsys):
    args = ["--content-dir", str(content_dir), "--images-dir", str(images_dir), "--raw-dir", str(tmp_path / "none")]
    assert cli.process_images(args) == 0
    assert "No raw images found" in capsys.readouterr().out


# --------------------------------------------------------------------
# 2) Long filename shortening
# --------------------------------------------------------------------
def test_shorten_moves_image_and_document(store, content_dir, images_dir, make_webp):
    slug = LONG + "_x"
    make_webp(images_dir / f"{slug}.webp")
    write_doc(content_dir, slug, name="Long", imageFileBase=slug)
    make_webp(images_dir / "short.webp")

    [result] = shorten_long_names(store)

    assert result.old == slug
    assert result.new == "a_very_long_character_name_that"
    assert result.document_moved
    assert not (content_dir / f"{slug}.md").exists()
    header, _ = frontmatter.parse((content_dir / f"{result.new}.md").read_text())
    assert header["imageFileBase"] == result.new
    assert (images_dir / f"{result.new}.webp").exists()


def test_shorten_threshold_is_exclusive(store, images_dir, make_webp):
    make_webp(images_dir / (LONG[:65] + ".webp"))  # exactly 70 chars
    assert shorten_long_names(store) == []


def test_shorten_image_without_document(store, images_dir, make_webp):
    slug = LONG + "_x"
    make_webp(images_dir / f"{slug}.webp")
    make_webp(images_dir / "a_very_long_character_name_that.webp")
    [result] = shorten_long_names(store)
    assert result.new == "a_very_long_character_name_that-1"
    assert not result.document_moved


def test_shorten_leaves_document_pointing_elsewhere(store, content_dir, images_dir, make_webp, caplog):
    slug = LONG + "_x"
    make_webp(images_dir / f"{slug}.webp")
    write_doc(content_dir, slug, name="Long", imageFileBase="other")

    with caplog.at_level(logging.WARNING, logger="character_admin.maintenance"):
        [result] = shorten_long_names(store)

    assert not result.document_moved
    assert result.document_kept
    assert (content_dir / f"{slug}.md").exists()
    assert (images_dir / f"{result.new}.webp").exists()
    assert "references a different image" in caplog.text
    assert "not found" not in caplog.text


def test_shorten_names_cli(content_dir, images_dir, make_webp, capsys):
    args = ["--content-dir", str(content_dir), "--images-dir", str(images_dir)]
    assert cli.shorten_names(args) == 0
    assert "No long filenames to shorten." in capsys.readouterr().out

    make_webp(images_dir / f"{LONG}_x.webp")
    assert cli.shorten_names(args) == 0
    assert "Renamed" in capsys.readouterr().out


# --------------------------------------------------------------------
# 3) Validation
# --------------------------------------------------------------------
@pytest.mark.parametrize("value,expected", [
    (None, True), ("", True), ("  ", True), ([], True),
    ("x", False), (["a"], False), (0, False),
])
def test_is_empty_value(value, expected):
    assert is_empty_value(value) is expected


def test_validate_content_failures_and_warnings(store, content_dir, images_dir, make_webp):
    write_doc(content_dir, "good", name="Grom", tags=["brute"], imageFileBase="good")
    make_webp(images_dir / "good.webp")
    write_doc(content_dir, "missing", name="Nope")
    write_doc(content_dir, "mismatch", name="Odd", imageFileBase="other")
    write_doc(content_dir, "warned", name="Al", tags=["two words"], imageFileBase="warned")
    (content_dir / "broken.md").write_text("---\nname: [x\n---\n")

    report = validate_content(store)

    assert report.checked == 5
    failed = sorted(i.filename for i in report.failures)
    assert failed == ["broken.md", "mismatch.md", "missing.md"]
    warned = [(i.filename, i.message) for i in report.warnings]
    assert ("warned.md", "name is very short, consider expanding.") in warned
    assert ("warned.md", "tags contain spaces; consider kebab-case tokens.") in warned
    assert ("warned.md", "image warned.webp not found.") in warned
    assert not any(f == "good.md" for f, _ in warned)


def test_validate_content_reports_non_utf8_document(store, content_dir):
    write_doc(content_dir, "good", name="Grom", imageFileBase="good")
    (content_dir / "latin.md").write_bytes(b"---\nname: Caf\xe9\nimageFileBase: latin\n---\n")

    report = validate_content(store)

    assert report.checked == 2
    [issue] = report.failures
    assert issue.filename == "latin.md"
    assert issue.message.startswith("could not be parsed")


def test_validate_cli_exit_codes(content_dir, images_dir, capsys):
    args = ["--content-dir", str(content_dir), "--images-dir", str(images_dir)]
    write_doc(content_dir, "al", name="Al", imageFileBase="al")
    # warnings only
    assert cli.validate(args) == 0
    captured = capsys.readouterr()
    assert "Validation passed." in captured.out
    assert "[WARN] al.md" in captured.err

    write_doc(content_dir, "bad")
    assert cli.validate(args) == 1
    err = capsys.readouterr().err
    assert "[FAIL] bad.md: missing required field 'imageFileBase'" in err
    assert "Validation failed: 1 issue(s) found." in err
