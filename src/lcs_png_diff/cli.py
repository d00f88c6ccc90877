from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from lcs_png_diff import __version__
from lcs_png_diff.batch import run_batch
from lcs_png_diff.conf import DiffSettings
from lcs_png_diff.manifest import DiffPair, ManifestError, load_manifest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lcs-png-diff",
        description="PNG diff tool with LCS algorithm",
    )
    parser.add_argument("-b", "--before-png", help="Path to the before png")
    parser.add_argument("-a", "--after-png", help="Path to the after png")
    parser.add_argument("-d", "--diff-png", help="Path to the diff result png")
    parser.add_argument("-j", "--batch-json", help="Path to the batch diff json file")
    parser.add_argument("-w", "--workers", type=int, help="Number of worker threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.batch_json:
        try:
            pairs = load_manifest(args.batch_json)
        except ManifestError:
            logger.exception("Could not load batch manifest %s", args.batch_json)
            return 1
    elif args.before_png and args.after_png:
        pairs = [DiffPair(before=args.before_png, after=args.after_png, result=args.diff_png)]
    else:
        parser.error("either --batch-json or both --before-png and --after-png are required")

    overrides: dict[str, object] = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    try:
        settings = DiffSettings(**overrides)
    except ValidationError as e:
        parser.error(f"invalid settings: {e}")

    outcomes = run_batch(pairs, settings)
    failed = [outcome for outcome in outcomes if not outcome.ok]
    for outcome in failed:
        logger.error("%s: %s: %s", outcome.result, outcome.error_type, outcome.error)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
