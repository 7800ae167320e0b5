"""Unit tests for doc_tree.workspace_mirror module."""

import shutil

import pytest

from src.doc_tree.errors import MirrorError
from src.doc_tree.workspace_mirror import MIRROR_DIR_NAME, mirror_tree, remove_mirror


class TestMirrorTree:
    """Test cases for mirror_tree."""

    def test_copies_nested_tree(self, tmp_path):
        """Files and directories are copied recursively."""
        source = tmp_path / "src"
        (source / "sub" / "deeper").mkdir(parents=True)
        (source / "a.md").write_text("A", encoding="utf-8")
        (source / "sub" / "deeper" / "b.md").write_text("B", encoding="utf-8")
        (source / "image.png").write_bytes(b"\x89PNG")
        dest = tmp_path / "dest"

        mirror_tree(str(source), str(dest))

        assert (dest / "a.md").read_text(encoding="utf-8") == "A"
        assert (dest / "sub" / "deeper" / "b.md").read_text(encoding="utf-8") == "B"
        assert (dest / "image.png").read_bytes() == b"\x89PNG"

    def test_excludes_nested_destination(self, tmp_path):
        """A mirror inside its own source doesn't copy itself."""
        (tmp_path / "a.md").write_text("A", encoding="utf-8")
        mirror = tmp_path / MIRROR_DIR_NAME

        mirror_tree(str(tmp_path), str(mirror), exclude=str(mirror))

        assert (mirror / "a.md").exists()
        assert not (mirror / MIRROR_DIR_NAME).exists()

    def test_excludes_existing_mirror_contents(self, tmp_path):
        """An existing mirror folder is skipped entirely."""
        (tmp_path / "a.md").write_text("A", encoding="utf-8")
        mirror = tmp_path / MIRROR_DIR_NAME
        mirror.mkdir()
        (mirror / "stale.md").write_text("old", encoding="utf-8")
        other = tmp_path.parent / f"{tmp_path.name}-copy"

        mirror_tree(str(tmp_path), str(other), exclude=str(mirror))

        assert (other / "a.md").exists()
        assert not (other / MIRROR_DIR_NAME).exists()

    def test_missing_source_raises(self, tmp_path):
        """A missing source directory raises MirrorError."""
        with pytest.raises(MirrorError, match="does not exist"):
            mirror_tree(str(tmp_path / "missing"), str(tmp_path / "dest"))

    def test_copy_failure_raises(self, tmp_path, mocker):
        """Per-file copy failures abort with MirrorError."""
        (tmp_path / "src").mkdir()
        mocker.patch(
            "src.doc_tree.workspace_mirror.shutil.copytree",
            side_effect=shutil.Error([("src/a.md", "dest/a.md", "Permission denied")]),
        )

        with pytest.raises(MirrorError) as exc_info:
            mirror_tree(str(tmp_path / "src"), str(tmp_path / "dest"))

        assert "Permission denied" in str(exc_info.value)
        assert "1 failure(s)" in str(exc_info.value)

    def test_os_error_raises(self, tmp_path, mocker):
        """Other OS errors are wrapped as MirrorError."""
        (tmp_path / "src").mkdir()
        mocker.patch(
            "src.doc_tree.workspace_mirror.shutil.copytree",
            side_effect=OSError("disk full"),
        )

        with pytest.raises(MirrorError, match="disk full"):
            mirror_tree(str(tmp_path / "src"), str(tmp_path / "dest"))


class TestRemoveMirror:
    """Test cases for remove_mirror."""

    def test_removes_directory(self, tmp_path):
        mirror = tmp_path / MIRROR_DIR_NAME
        (mirror / "sub").mkdir(parents=True)
        (mirror / "sub" / "a.md").write_text("A", encoding="utf-8")

        assert remove_mirror(str(mirror)) is True
        assert not mirror.exists()

    def test_missing_directory_is_success(self, tmp_path):
        assert remove_mirror(str(tmp_path / "nothing")) is True

    def test_failure_is_logged_not_raised(self, tmp_path, mocker, caplog):
        """Removal failures return False with a warning."""
        mirror = tmp_path / MIRROR_DIR_NAME
        mirror.mkdir()
        mocker.patch("src.doc_tree.workspace_mirror.shutil.rmtree", side_effect=OSError("busy"))

        with caplog.at_level("WARNING"):
            assert remove_mirror(str(mirror)) is False

        assert "busy" in caplog.text
