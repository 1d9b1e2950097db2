"""Tests for mockup_agents.models.sources module."""

from mockup_agents.models.sources import DEFAULT_BOX, LocalImageFile


class TestLocalImageFile:
    """Tests for LocalImageFile."""

    def test_from_path_guesses_mime_type(self, tmp_path, sample_png_bytes):
        path = tmp_path / "logo.png"
        path.write_bytes(sample_png_bytes)

        file = LocalImageFile.from_path(path)

        assert file.mime_type == "image/png"
        assert file.name == "logo.png"
        assert file.content == sample_png_bytes
        assert file.is_image

    def test_from_path_explicit_mime_type(self, tmp_path):
        path = tmp_path / "logo.bin"
        path.write_bytes(b"\x00\x01")
        assert LocalImageFile.from_path(path, mime_type="image/webp").mime_type == "image/webp"

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "logo.unknownext"
        path.write_bytes(b"\x00\x01")
        file = LocalImageFile.from_path(path)
        assert file.mime_type == "application/octet-stream"
        assert not file.is_image

    def test_repr_hides_content(self):
        file = LocalImageFile(content=b"abc", mime_type="image/png", name="a.png")
        assert "size=3" in repr(file)


def test_default_box_is_remote():
    assert DEFAULT_BOX.url.startswith("https://")
    assert DEFAULT_BOX.id == "cardboard-box"
