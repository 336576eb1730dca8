import struct
from unittest.mock import patch

from PIL import Image

from clipstack.utils import compute_hash, create_thumbnail, ensure_dirs, get_image_dimensions, truncate_text


class TestComputeHash:
    def test_string_input(self):
        h = compute_hash("hello")
        assert isinstance(h, str)
        assert len(h) == 64  # SHA-256 hex digest

    def test_same_content_same_hash(self):
        assert compute_hash("test") == compute_hash("test")

    def test_different_content_different_hash(self):
        assert compute_hash("abc") != compute_hash("xyz")

    def test_string_and_bytes_same_hash(self):
        assert compute_hash("hello") == compute_hash(b"hello")


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("hello", 60) == "hello"

    def test_long_text_truncated(self):
        result = truncate_text("a" * 100, 60)
        assert len(result) == 60
        assert result.endswith("...")

    def test_multiline_collapsed(self):
        assert truncate_text("hello\nworld\nfoo", 60) == "hello world foo"

    def test_exact_length_not_truncated(self):
        text = "a" * 60
        assert truncate_text(text, 60) == text


class TestGetImageDimensions:
    def test_valid_png(self):
        header = b"\x89PNG\r\n\x1a\n"
        ihdr_type = b"\x00\x00\x00\rIHDR"
        png_bytes = header + ihdr_type + struct.pack(">I", 1920) + struct.pack(">I", 1080) + b"\x00" * 100
        assert get_image_dimensions(png_bytes) == (1920, 1080)

    def test_invalid_data(self):
        assert get_image_dimensions(b"not a png") == (0, 0)

    def test_too_short(self):
        assert get_image_dimensions(b"\x89PNG") == (0, 0)


class TestEnsureDirs:
    def test_creates_directories(self, tmp_path):
        data_dir = tmp_path / "data"
        image_dir = data_dir / "thumbnails"

        with patch("clipstack.utils.DATA_DIR", data_dir), patch("clipstack.utils.IMAGE_DIR", image_dir):
            ensure_dirs()
            ensure_dirs()  # Should not raise

        assert data_dir.exists()
        assert image_dir.exists()


class TestCreateThumbnail:
    def test_valid_png_creates_thumbnail(self, tmp_path, make_png):
        thumb_file = tmp_path / "thumb.png"
        assert create_thumbnail(make_png(size=(64, 32)), thumb_file, size=(16, 16)) is True
        with Image.open(thumb_file) as thumb:
            assert thumb.format == "PNG"
            assert thumb.size == (16, 8)

    def test_invalid_image_returns_false(self, tmp_path):
        assert create_thumbnail(b"not a valid image", tmp_path / "thumb.png") is False

    def test_missing_directory_returns_false(self, tmp_path, make_png):
        assert create_thumbnail(make_png(), tmp_path / "missing" / "thumb.png") is False
