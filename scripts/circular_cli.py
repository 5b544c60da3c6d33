# scripts/circular_cli.py
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from config import AppConfig, load_config
from models.circular import CircularMode, CircularType
from models.uploads import ImageFile
from services.circulars import CircularDataService
from services.ocr import OcrClient
from services.storage import FileDocumentStore
from utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


def build_service(config: AppConfig) -> CircularDataService:
    store = FileDocumentStore(config.storage.directory)
    return CircularDataService(store, config.storage.storage_key)


def cmd_export(service: CircularDataService, args: argparse.Namespace) -> int:
    payload = service.export_data()
    if args.out:
        Path(args.out).write_text(payload, encoding="utf-8")
        logger.info(f"Exported circulars to {args.out}")
    else:
        print(payload)
    return 0


def cmd_import(service: CircularDataService, args: argparse.Namespace) -> int:
    payload = Path(args.file).read_text(encoding="utf-8")
    if not service.import_data(payload):
        print("Import failed: invalid data structure", file=sys.stderr)
        return 1
    logger.info(f"Imported circulars from {args.file}")
    return 0


def cmd_list(service: CircularDataService, args: argparse.Namespace) -> int:
    print("Master circulars:")
    for circular_type in CircularType:
        stats = service.get_stats(circular_type, CircularMode.MASTER)
        print(
            f"  {circular_type.value}: {stats.chapters_count} chapters, "
            f"{stats.clauses_count} clauses, {stats.annexures_count} annexures"
        )
    print("Normal circulars:")
    for name in service.get_normal_circular_names():
        stats = service.get_stats(name, CircularMode.NORMAL)
        print(f"  {name}: {stats.clauses_count} clauses, {stats.annexures_count} annexures")
    return 0


def cmd_stats(service: CircularDataService, args: argparse.Namespace) -> int:
    mode = CircularMode(args.mode)
    if mode == CircularMode.MASTER:
        try:
            circular = CircularType(args.circular)
        except ValueError:
            print(f"Unknown master circular: {args.circular}", file=sys.stderr)
            return 1
    else:
        circular = args.circular
    stats = service.get_stats(circular, mode)
    print(f"Chapters:  {stats.chapters_count}")
    print(f"Clauses:   {stats.clauses_count}")
    print(f"Annexures: {stats.annexures_count}")
    return 0


def cmd_ocr(config: AppConfig, args: argparse.Namespace) -> int:
    images = [ImageFile.from_path(path) for path in args.images]
    client = OcrClient(config.ocr)

    with tqdm(total=len(images), desc="OCR", unit="image") as bar:
        def on_progress(index: int, value: float):
            if value >= 100:
                bar.update(1)

        batch = client.process_images(images, on_progress=on_progress)

    for item in batch.results:
        if not item.result.success:
            print(f"{item.filename}: {item.result.error}", file=sys.stderr)
    logger.info(f"OCR finished: {batch.succeeded} succeeded, {batch.failed} failed")

    if batch.combined_text:
        if args.out:
            Path(args.out).write_text(batch.combined_text, encoding="utf-8")
        else:
            print(batch.combined_text)
    return 0 if batch.succeeded else 1


def cmd_clear(service: CircularDataService, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear data without --yes", file=sys.stderr)
        return 1
    return 0 if service.clear_all_data() else 1


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage master and normal circulars")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write the full document as JSON")
    export_parser.add_argument("--out", help="Output file (defaults to stdout)")

    import_parser = subparsers.add_parser("import", help="Replace the document from a JSON file")
    import_parser.add_argument("file", help="JSON export, current or legacy layout")

    subparsers.add_parser("list", help="List circulars with their counts")

    stats_parser = subparsers.add_parser("stats", help="Show counts for one circular")
    stats_parser.add_argument(
        "--mode", default="master", choices=[m.value for m in CircularMode]
    )
    stats_parser.add_argument(
        "--circular", required=True, help="2023/2024 for master, the name for normal"
    )

    ocr_parser = subparsers.add_parser("ocr", help="Extract text from images")
    ocr_parser.add_argument("images", nargs="+", help="Image files, processed in order")
    ocr_parser.add_argument("--out", help="Write the combined text here")

    clear_parser = subparsers.add_parser("clear", help="Delete all stored circulars")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config()
    setup_logging(config.log_directory)

    if args.command == "ocr":
        return cmd_ocr(config, args)

    service = build_service(config)
    handlers = {
        "export": cmd_export,
        "import": cmd_import,
        "list": cmd_list,
        "stats": cmd_stats,
        "clear": cmd_clear,
    }
    return handlers[args.command](service, args)


if __name__ == "__main__":
    sys.exit(main())
