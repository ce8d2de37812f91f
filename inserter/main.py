import argparse
import sys
from typing import List, Optional

from inserter.batch_processor import BatchProcessor, setup_batch_logger
from inserter.config import load_config
from inserter.errors import BatchError, SetupError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="inserter",
        description="Write spreadsheet text into the empty bands of images.",
    )
    parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
    parser.add_argument("--images", help="images directory")
    parser.add_argument("--text", help="workbook directory")
    parser.add_argument("--result", help="output directory")
    parser.add_argument("--batch-size", type=int, help="images processed concurrently per batch")
    parser.add_argument("--format", choices=["jpeg", "png"], help="output image format")
    return parser.parse_args(argv)


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """CLI flags win over the YAML values."""
    paths = dict(config.get("paths") or {})
    for key, value in (("images_dir", args.images), ("text_dir", args.text), ("result_dir", args.result)):
        if value:
            paths[key] = value
    config["paths"] = paths

    if args.batch_size is not None:
        batch = dict(config.get("batch") or {})
        batch["batch_size"] = args.batch_size
        config["batch"] = batch

    if args.format:
        output = dict(config.get("output") or {})
        output["format"] = args.format
        config["output"] = output

    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger = setup_batch_logger()

    # 1. Load Config
    try:
        config = apply_overrides(load_config(args.config), args)
    except SetupError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    print("=" * 60)
    print("TEXT INSERTION")
    print("=" * 60)

    # 2. Run all batches
    try:
        stats = BatchProcessor(config).run_sync()
    except SetupError as e:
        logger.error(f"Setup failed: {e}")
        return 1
    except BatchError as e:
        logger.error(f"Fatal error: {e}")
        return 1

    print(f"\n[COMPLETE] Insertion finished.")
    print(f"  Processed: {stats['processed']}/{stats['total']}")
    if stats['failed'] > 0:
        print(f"  Failed images: {stats['failed_images']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
