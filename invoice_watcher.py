#!/usr/bin/env python3
"""
Invoice Folder Watcher - Batch Re-processing

Watches a folder for OCR text dumps (one invoice per .txt file) and runs each
through the invoice text parser, writing the extracted invoice next to the
other results as <name>.json for review.

Usage:
    python invoice_watcher.py --watch-folder ./ocr-incoming
    python invoice_watcher.py --watch-folder ./ocr-incoming --once
"""

import argparse
import json
import time
from pathlib import Path
from datetime import datetime
from loguru import logger
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from billscan.core.logging import setup_logging
from billscan.services.parsing import create_vendor_heuristics, parse_invoice_text
from billscan.services.storage import taxonomy_store

TEXT_SUFFIX = ".txt"


class OcrTextHandler(FileSystemEventHandler):
    """Handles new OCR text file events"""

    def __init__(self, watch_folder, output_folder, settle_seconds: float = 1.0):
        self.watch_folder = Path(watch_folder)
        self.output_folder = Path(output_folder)
        self.settle_seconds = settle_seconds
        self.processed_files = set()
        self.heuristics = create_vendor_heuristics()

        self.output_folder.mkdir(parents=True, exist_ok=True)

    def on_created(self, event):
        """Called when a file is created in the watched folder"""
        if event.is_directory:
            return

        file_path = Path(event.src_path)
        if file_path.suffix.lower() != TEXT_SUFFIX:
            return

        # Small delay to ensure file is fully written
        time.sleep(self.settle_seconds)

        if not file_path.exists():
            return

        self.process_file(file_path)

    def process_existing(self) -> int:
        """Parse every text file already in the watch folder; returns how many were written"""
        count = 0
        for file_path in sorted(self.watch_folder.glob(f"*{TEXT_SUFFIX}")):
            if self.process_file(file_path) is not None:
                count += 1
        return count

    def process_file(self, file_path: Path) -> Path | None:
        """Parse one OCR text file and write <name>.json; returns the output path"""
        # Avoid processing the same file multiple times
        if file_path in self.processed_files:
            return None
        self.processed_files.add(file_path)

        logger.info("OCR text detected", file=file_path.name, size=file_path.stat().st_size)

        try:
            text = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error(f"Could not read {file_path.name}: {e}")
            return None

        # Taxonomy is read fresh per file
        invoice = parse_invoice_text(
            text,
            taxonomy_store.list_categories(),
            heuristics=self.heuristics,
        )

        dest_path = self.output_folder / f"{file_path.stem}.json"
        dest_path.write_text(invoice.model_dump_json(indent=2), encoding="utf-8")

        logger.info(
            "Invoice parsed",
            file=file_path.name,
            vendor=invoice.vendor_name or "-",
            invoice_number=invoice.invoice_number,
            items=len(invoice.items),
            total_mismatch=invoice.has_total_mismatch
        )

        self.log_processing(file_path.name, invoice.model_dump(), dest_path)
        return dest_path

    def log_processing(self, filename: str, data: dict, dest_path: Path):
        """Append a summary line to processing_log.json in the output folder"""
        log_file = self.output_folder / "processing_log.json"

        if log_file.exists():
            with open(log_file, 'r') as f:
                log_data = json.load(f)
        else:
            log_data = []

        log_data.append({
            "timestamp": datetime.now().isoformat(),
            "filename": filename,
            "invoice_number": data["invoice_number"],
            "invoice_number_synthesized": data["invoice_number_synthesized"],
            "vendor_name": data["vendor_name"],
            "item_count": len(data["items"]),
            "has_total_mismatch": data["has_total_mismatch"],
            "destination": str(dest_path)
        })

        with open(log_file, 'w') as f:
            json.dump(log_data, f, indent=2)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Watch a folder for OCR text dumps and parse them into invoices'
    )
    parser.add_argument(
        '--watch-folder',
        default='./ocr-incoming',
        help='Folder to watch for .txt OCR dumps (default: ./ocr-incoming)'
    )
    parser.add_argument(
        '--output-folder',
        default='./invoices-parsed',
        help='Folder for parsed <name>.json results (default: ./invoices-parsed)'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Process the files already in the watch folder and exit'
    )
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    setup_logging()

    watch_folder = Path(args.watch_folder)
    watch_folder.mkdir(parents=True, exist_ok=True)

    event_handler = OcrTextHandler(watch_folder, args.output_folder)
    processed = event_handler.process_existing()
    logger.info("Existing files processed", count=processed, folder=str(watch_folder.absolute()))

    if args.once:
        return 0

    observer = Observer()
    observer.schedule(event_handler, str(watch_folder), recursive=False)
    observer.start()

    logger.info(
        "Watching for OCR text dumps (Ctrl+C to stop)",
        watch_folder=str(watch_folder.absolute()),
        output_folder=str(Path(args.output_folder).absolute())
    )

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping watcher...")
        observer.stop()

    observer.join()
    logger.info("Watcher stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
