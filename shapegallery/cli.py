"""Command-line interface for managing a shape gallery."""

import argparse
import json
import logging
import sys
from pathlib import Path

from shapegallery.config import Settings
from shapegallery.document import PptxGalleryDocument
from shapegallery.errors import GalleryCorruptedError, GalleryError
from shapegallery.gallery import ShapeGallery

logger = logging.getLogger("shapegallery.cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="shape-gallery",
        description="Manage a categorized shape gallery and its image mirror",
    )
    parser.add_argument("--dir", type=Path, help="Gallery folder (default: $SHAPE_GALLERY_DIR)")
    parser.add_argument("--name", help="Gallery file name without extension")
    parser.add_argument("--log-level", help="Logging level (default: $SHAPE_GALLERY_LOG_LEVEL)")

    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Run the consistency check")
    check.add_argument("--json", action="store_true", help="Print the report as JSON")

    commands.add_parser("list", help="List categories and shapes")

    add_category = commands.add_parser("add-category", help="Add a category")
    add_category.add_argument("category")

    remove_category = commands.add_parser("remove-category", help="Remove a category")
    remove_category.add_argument("category")

    rename_category = commands.add_parser("rename-category", help="Rename a category")
    rename_category.add_argument("category")
    rename_category.add_argument("new_name")

    add_shape = commands.add_parser("add-shape", help="Add a shape copied from a .pptx file")
    add_shape.add_argument("source", type=Path, help="Presentation holding the shape")
    add_shape.add_argument("shape", help="Name of the shape in the source slide")
    add_shape.add_argument("--slide", type=int, default=1, help="1-based source slide number")
    add_shape.add_argument("--as", dest="new_name", help="Name in the gallery (default: same)")
    add_shape.add_argument("--category", help="Target category (default: first category)")

    remove_shape = commands.add_parser("remove-shape", help="Remove a shape")
    remove_shape.add_argument("shape")
    remove_shape.add_argument("--category")

    rename_shape = commands.add_parser("rename-shape", help="Rename a shape")
    rename_shape.add_argument("shape")
    rename_shape.add_argument("new_name")
    rename_shape.add_argument("--category")

    move_shape = commands.add_parser("move-shape", help="Move a shape to another category")
    move_shape.add_argument("shape")
    move_shape.add_argument("dest")
    move_shape.add_argument("--category")

    copy_shape = commands.add_parser("copy-shape", help="Copy a shape to another category")
    copy_shape.add_argument("shape")
    copy_shape.add_argument("dest")
    copy_shape.add_argument("--category")

    import_gallery = commands.add_parser("import", help="Import the categories of another gallery file")
    import_gallery.add_argument("source", type=Path)

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings()
    if args.dir:
        settings.gallery_dir = args.dir.expanduser()
    if args.name:
        settings.gallery_name = args.name
    if args.log_level:
        settings.log_level = args.log_level.upper()
    return settings


def _run(gallery: ShapeGallery, args: argparse.Namespace) -> None:
    """Execute one command against an open gallery."""
    if args.command == "check":
        report = gallery.last_report
        if args.json:
            print(json.dumps(report.model_dump(mode="json"), indent=2))
        else:
            print(report.summary())

    elif args.command == "list":
        for category in gallery.categories:
            marker = "*" if category == gallery.default_category else " "
            print(f"{marker} {category}")
            for shape in gallery.shape_names(category):
                print(f"    {shape}")

    elif args.command == "add-category":
        gallery.add_category(args.category)

    elif args.command == "remove-category":
        gallery.remove_category(args.category)

    elif args.command == "rename-category":
        gallery.rename_category(args.new_name, category=args.category)

    elif args.command == "add-shape":
        source = PptxGalleryDocument.open(args.source)
        try:
            slides = source.categories
            if args.slide < 1 or args.slide > len(slides):
                raise IndexError(f"Slide {args.slide} not found. File has {len(slides)} slides.")
            shapes = slides[args.slide - 1].shapes_named(args.shape)
            if not shapes:
                raise GalleryError(f"Shape '{args.shape}' not found on slide {args.slide}")
            gallery.add_shape(shapes, args.new_name or args.shape, category=args.category)
        finally:
            source.close()

    elif args.command == "remove-shape":
        gallery.remove_shape(args.shape, category=args.category)

    elif args.command == "rename-shape":
        gallery.rename_shape(args.shape, args.new_name, category=args.category)

    elif args.command == "move-shape":
        gallery.move_shape(args.shape, args.dest, category=args.category)

    elif args.command == "copy-shape":
        gallery.copy_shape(args.shape, args.dest, category=args.category)

    elif args.command == "import":
        for name in gallery.import_gallery(args.source):
            print(f"Imported category '{name}'")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _settings_from_args(args)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    gallery = ShapeGallery(settings=settings)
    try:
        gallery.open()
    except GalleryCorruptedError as e:
        print(e.report.summary(), file=sys.stderr)
        return 1
    except GalleryError as e:
        logger.error(str(e))
        return 1

    try:
        _run(gallery, args)
    except (GalleryError, IndexError) as e:
        logger.error(str(e))
        return 1
    finally:
        gallery.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
