"""Tests for the on-disk mirror store."""

from pathlib import Path

import pytest

from shapegallery.consistency import MirrorStore, validate_name
from shapegallery.errors import InvalidNameError

from conftest import write_images


class TestValidateName:
    """Tests for filesystem-safe name validation."""

    @pytest.mark.parametrize("name", ["Arrows", "Line (recovered shape 1)", "v1.2", "Flow Chart"])
    def test_accepts_safe_names(self, name: str) -> None:
        assert validate_name(name) == name

    @pytest.mark.parametrize("name", ["", "   ", ".", "..", "a/b", "a\\b", "a:b", "a*", "a?", 'a"b', "<a>", "a|b"])
    def test_rejects_unsafe_names(self, name: str) -> None:
        with pytest.raises(InvalidNameError):
            validate_name(name)

    def test_invalid_name_is_value_error(self) -> None:
        """Callers catching ValueError also catch invalid names."""
        with pytest.raises(ValueError):
            validate_name("a/b")


class TestMirrorStore:
    """Tests for MirrorStore filesystem operations."""

    def test_paths(self, tmp_path: Path) -> None:
        store = MirrorStore(tmp_path)
        assert store.category_path("Arrows") == tmp_path / "Arrows"
        assert store.image_path("Arrows", "Line") == tmp_path / "Arrows" / "Line.png"

    def test_list_category_folders_ignores_files(self, tmp_path: Path) -> None:
        (tmp_path / "Arrows").mkdir()
        (tmp_path / "Basic").mkdir()
        (tmp_path / "ShapeGallery.pptx").write_bytes(b"")

        assert MirrorStore(tmp_path).list_category_folders() == ["Arrows", "Basic"]

    def test_list_category_folders_missing_root(self, tmp_path: Path) -> None:
        assert MirrorStore(tmp_path / "missing").list_category_folders() == []

    def test_list_images_only_png(self, tmp_path: Path) -> None:
        folder = write_images(tmp_path, "Arrows", ["Line", "Box"])
        (folder / "notes.txt").write_text("x")
        (folder / "Sub").mkdir()

        assert MirrorStore(tmp_path).list_images("Arrows") == ["Box", "Line"]

    def test_list_images_missing_folder(self, tmp_path: Path) -> None:
        assert MirrorStore(tmp_path).list_images("Arrows") == []

    def test_create_folder_is_idempotent(self, tmp_path: Path) -> None:
        store = MirrorStore(tmp_path / "root")
        store.create_folder("Arrows")
        store.create_folder("Arrows")

        assert store.folder_exists("Arrows")

    def test_delete_file(self, tmp_path: Path) -> None:
        write_images(tmp_path, "Arrows", ["Line"])
        store = MirrorStore(tmp_path)

        assert store.delete_image("Arrows", "Line") is True
        assert store.delete_image("Arrows", "Line") is False
        assert not store.image_exists("Arrows", "Line")

    def test_delete_folder(self, tmp_path: Path) -> None:
        write_images(tmp_path, "Arrows", ["Line"])
        store = MirrorStore(tmp_path)

        assert store.delete_folder("Arrows") is True
        assert not (tmp_path / "Arrows").exists()
        assert store.delete_folder("Arrows") is False

    def test_rename_folder(self, tmp_path: Path) -> None:
        write_images(tmp_path, "Arrows", ["Line"])
        store = MirrorStore(tmp_path)

        store.rename_folder("Arrows", "Pointers")

        assert store.list_category_folders() == ["Pointers"]
        assert store.image_exists("Pointers", "Line")

    def test_rename_image(self, tmp_path: Path) -> None:
        write_images(tmp_path, "Arrows", ["Line"])
        store = MirrorStore(tmp_path)

        assert store.rename_image("Arrows", "Line", "Arrow") is True
        assert store.list_images("Arrows") == ["Arrow"]
        assert store.rename_image("Arrows", "Missing", "Other") is False

    def test_move_and_copy_image(self, tmp_path: Path) -> None:
        write_images(tmp_path, "Arrows", ["Line", "Box"])
        store = MirrorStore(tmp_path)

        assert store.move_image("Line", "Arrows", "Basic") is True
        assert store.copy_image("Box", "Arrows", "Basic") is True

        assert store.list_images("Arrows") == ["Box"]
        assert store.list_images("Basic") == ["Box", "Line"]

    def test_adopt_image(self, tmp_path: Path) -> None:
        folder = write_images(tmp_path, "Arrows", ["Box"])
        (folder / "Arrow; Right.png").write_bytes(b"x")
        store = MirrorStore(tmp_path)

        assert store.adopt_image("Arrows", "Arrow; Right", "Arrow Right") is True
        assert store.list_images("Arrows") == ["Arrow Right", "Box"]

    def test_adopt_image_never_overwrites(self, tmp_path: Path) -> None:
        folder = write_images(tmp_path, "Arrows", ["Box", "Box2"])
        store = MirrorStore(tmp_path)

        assert store.adopt_image("Arrows", "Box2", "Box") is False
        assert store.adopt_image("Arrows", "../Box", "Box3") is False
        assert store.adopt_image("Arrows", "Missing", "Box3") is False
        assert store.list_images("Arrows") == ["Box", "Box2"]
