"""CLI entrypoint for the Space-Track TLE fetcher."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigError, SatfetchError
from satcat import download_catalog, load_catalog
from scheduler import BatchScheduler
from spacetrack_client import SpaceTrackClient, api_root_from_env

VERSION = "satfetch v0.1"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Fetch Space-Track TLEs for every object in a SATCAT")
    parser.add_argument("-v", "--version", action="store_true", help="Print version number.")
    parser.add_argument(
        "--satcat",
        default="",
        help="CSV-formatted SATCAT to use for other operations.",
    )
    parser.add_argument(
        "--download-satcat",
        action="store_true",
        help="Download the Space-Track satellite catalog to the --satcat path before loading it.",
    )
    parser.add_argument(
        "--tle",
        action="store_true",
        help="Fetch Space-Track TLEs for satellites listed in the specified SATCAT.",
    )
    parser.add_argument(
        "--tle-dir",
        default="./tle",
        help="Directory where TLEs are stored, one file per NORAD ID.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=5,
        help="Max number of NORAD IDs to fetch per TLE request.",
    )
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> None:
    """Load the catalog and, with --tle, fetch batches until interrupted."""
    if not args.satcat:
        raise ConfigError("No SATCAT given; pass --satcat PATH")
    if args.batch_size < 1:
        raise ConfigError(f"--batch-size must be at least 1, got {args.batch_size}")

    client: SpaceTrackClient | None = None
    api_root = ""
    if args.download_satcat or args.tle:
        client = SpaceTrackClient.from_env()
        api_root = api_root_from_env()

    if args.download_satcat:
        download_catalog(args.satcat, client.post_query, api_root)

    rows = load_catalog(args.satcat)
    if not rows:
        raise ConfigError(f"{args.satcat} has no catalog entries")
    logging.info(
        "Found %s catalog entries. First NORAD ID: %s Last NORAD ID: %s",
        len(rows),
        rows[0].norad_id,
        rows[-1].norad_id,
    )

    if not args.tle:
        return

    tle_dir = Path(args.tle_dir)
    try:
        tle_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Cannot create TLE directory {tle_dir}: {exc}") from exc

    scheduler = BatchScheduler(
        rows=rows,
        output_dir=tle_dir,
        batch_size=args.batch_size,
        transport=client.post_query,
        api_root=api_root,
    )

    def _on_signal(signum: int, _frame: object) -> None:
        logging.info("Received %s; stopping after the current cycle", signal.Signals(signum).name)
        scheduler.request_stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    logging.info("Fetching TLEs in batches of %s into %s", args.batch_size, tle_dir)
    scheduler.run()
    logging.info("Quitting at cursor %s", scheduler.cursor)


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the fetcher. Returns the process exit status."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    if args.version:
        print(VERSION)
        if not args.satcat:
            return 0

    try:
        run(args)
    except SatfetchError as exc:
        logging.error("Fatal: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
