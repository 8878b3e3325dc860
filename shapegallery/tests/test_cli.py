"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from shapegallery.cli import build_parser, main

from conftest import build_gallery_file, image_names, write_images


@pytest.fixture
def gallery_dir(tmp_path: Path) -> Path:
    root = tmp_path / "gallery"
    build_gallery_file(root / "ShapeGallery.pptx", [("Arrows", ["Line", "Box"])])
    write_images(root, "Arrows", ["Line", "Box"])
    return root


def run(gallery_dir: Path, *args: str) -> int:
    return main(["--dir", str(gallery_dir), "--name", "ShapeGallery", "--log-level", "warning", *args])


class TestCli:
    """Tests for the shape-gallery command."""

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_check(self, gallery_dir: Path, capsys) -> None:
        assert run(gallery_dir, "check") == 0
        assert "consistent" in capsys.readouterr().out

    def test_check_json(self, gallery_dir: Path, capsys) -> None:
        assert run(gallery_dir, "check", "--json") == 0

        report = json.loads(capsys.readouterr().out)
        assert report["categories"] == ["Arrows"]
        assert report["duplicate_found"] is False

    def test_check_corrupted(self, tmp_path: Path, capsys) -> None:
        root = tmp_path / "gallery"
        build_gallery_file(root / "ShapeGallery.pptx", [("Arrows", ["Line", "Line"])])

        assert run(root, "check") == 1
        assert "corrupted" in capsys.readouterr().err

    def test_list(self, gallery_dir: Path, capsys) -> None:
        assert run(gallery_dir, "list") == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["* Arrows", "    Line", "    Box"]

    def test_category_commands(self, gallery_dir: Path) -> None:
        assert run(gallery_dir, "add-category", "Basic") == 0
        assert run(gallery_dir, "rename-category", "Basic", "Shapes") == 0
        assert (gallery_dir / "Shapes").is_dir()

        assert run(gallery_dir, "remove-category", "Shapes") == 0
        assert not (gallery_dir / "Shapes").exists()

    def test_shape_commands(self, gallery_dir: Path) -> None:
        assert run(gallery_dir, "add-category", "Basic") == 0
        assert run(gallery_dir, "rename-shape", "Line", "Arrow", "--category", "Arrows") == 0
        assert run(gallery_dir, "move-shape", "Arrow", "Basic", "--category", "Arrows") == 0
        assert run(gallery_dir, "copy-shape", "Box", "Basic", "--category", "Arrows") == 0
        assert run(gallery_dir, "remove-shape", "Box", "--category", "Arrows") == 0

        assert image_names(gallery_dir, "Arrows") == []
        assert image_names(gallery_dir, "Basic") == ["Arrow", "Box"]

    def test_add_shape_from_file(self, gallery_dir: Path, tmp_path: Path) -> None:
        source = build_gallery_file(tmp_path / "source.pptx", [("Source", ["Star"])], name_boxes=False)

        assert run(gallery_dir, "add-shape", str(source), "Star", "--as", "Big Star") == 0

        assert image_names(gallery_dir, "Arrows") == ["Big Star", "Box", "Line"]

    def test_add_shape_bad_slide(self, gallery_dir: Path, tmp_path: Path) -> None:
        source = build_gallery_file(tmp_path / "source.pptx", [("Source", ["Star"])])

        assert run(gallery_dir, "add-shape", str(source), "Star", "--slide", "3") == 1

    def test_unknown_category(self, gallery_dir: Path) -> None:
        assert run(gallery_dir, "remove-category", "Missing") == 1

    def test_import(self, gallery_dir: Path, tmp_path: Path, capsys) -> None:
        foreign = build_gallery_file(tmp_path / "foreign" / "Legacy.pptx", [("Arrows", ["Star"])])

        assert run(gallery_dir, "import", str(foreign)) == 0

        assert "Imported category 'Arrows 1'" in capsys.readouterr().out
        assert image_names(gallery_dir, "Arrows 1") == ["Star"]
