#!/usr/bin/env python3
"""
Cache the most recent MSL raw images.

Fetches the image manifest, loads the catalogs of the latest sols into the
in-memory image cache and prints the first cached records.
"""

import argparse
import json
import logging
import signal
import sys
import threading
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mars_raw_images.data.loaders.cache_loader import CacheLoader, get_latest
from mars_raw_images.data.raw_images_client import RawImagesClient
from mars_raw_images.exceptions import FetchError, InsufficientDataError
from mars_raw_images.utils.config import get_config


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def print_images(images, as_json: bool = False):
    """Print cached images as a table or as ListOfImages JSON."""
    if as_json:
        print(json.dumps(images.to_dict(), indent=2))
        return

    for image in images.images:
        print(f"  sol {image.sol:>5}  {image.instrument:<24} {image.utc:<24} {image.url}")


def main(argv=None):
    """Main entry point."""
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Cache the latest MSL raw images in memory and list them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load the last 3 sols and list the first 20 images
  python cache_latest.py --sols 3 --count 20

  # Sequential fetching with a short timeout, JSON output
  python cache_latest.py --sols 5 --workers 1 --timeout 10 --json
        """,
    )

    parser.add_argument(
        "--manifest-url",
        type=str,
        default=config.manifest_url,
        help="Image manifest URL (default: MARS_IMAGES_MANIFEST_URL)",
    )

    parser.add_argument(
        "--sols",
        type=int,
        default=config.default_sols,
        help="Number of most recent sols to load (default: MARS_IMAGES_SOLS)",
    )

    parser.add_argument(
        "--count",
        type=int,
        default=10,
        help="Number of cached images to print (default: 10)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=config.request_timeout,
        help="Per-request timeout in seconds (default: MARS_IMAGES_TIMEOUT)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=config.max_workers,
        help="Concurrent catalog fetches (default: MARS_IMAGES_MAX_WORKERS)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print images as ListOfImages JSON",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (DEBUG level logging)",
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    with RawImagesClient(timeout=args.timeout) as client:
        try:
            manifest = client.fetch_manifest(args.manifest_url)
        except FetchError as e:
            logger.error(f"Could not fetch manifest: {e}")
            return 1

        loader = CacheLoader(
            client=client,
            max_workers=args.workers,
            show_progress=not args.json,
        )
        cancel_event = threading.Event()

        def interrupt(signum, frame):
            logger.info("\nLoad interrupted by user")
            cancel_event.set()

        previous_handler = signal.signal(signal.SIGINT, interrupt)
        try:
            report = loader.load_latest(manifest, args.sols, cancel_event=cancel_event)
        finally:
            signal.signal(signal.SIGINT, previous_handler)

    if report.cancelled:
        logger.warning(f"Load cancelled, {report.images_added} images cached")
        return 1

    summary = report.summary()
    logger.info("=" * 60)
    logger.info("Load Summary:")
    logger.info(f"  Sols requested: {summary['sols_requested']}")
    logger.info(f"  Sols loaded: {summary['sols_loaded']}")
    logger.info(f"  Sols failed: {summary['sols_failed']}")
    logger.info(f"  Images cached: {summary['images_added']}")
    logger.info("=" * 60)

    try:
        images = get_latest(args.count)
    except InsufficientDataError as e:
        logger.warning(str(e))
        print_images(get_latest(e.available), as_json=args.json)
        return 2

    print_images(images, as_json=args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
