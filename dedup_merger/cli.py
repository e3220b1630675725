"""Command-line interface for dedup merger."""

import argparse
import logging
import sys
from pathlib import Path

from .errors import ValidationError
from .fingerprint import DEFAULT_ALGORITHM, HASH_ALGORITHMS
from .merger import MergeEngine
from .report import FileReportSink

USAGE = "%(prog)s [options] <folder_1> [folder_2 ... folder_n] <destination>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        usage=USAGE,
        description="Merge several folders into a destination folder without duplicating content.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/folder1 /path/to/folder2 /path/to/output
  %(prog)s --hash xxh128 --log-dir ./logs folder1 folder2 folder3 merged_output
        """
    )

    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        metavar="PATH",
        help="Source folders followed by the destination folder"
    )

    parser.add_argument(
        "--hash",
        dest="algorithm",
        choices=sorted(HASH_ALGORITHMS),
        default=DEFAULT_ALGORITHM,
        help=f"Hash used to compare file contents (default: {DEFAULT_ALGORITHM})"
    )

    parser.add_argument(
        "--log-dir", "-l",
        type=Path,
        default=None,
        help="Directory for the error, duplicate and conflict logs "
             "(default: the destination's parent directory)"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Do not echo logged events to the console"
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide progress bars"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every file hash and copy"
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def split_paths(parser: argparse.ArgumentParser, paths: list[Path]) -> tuple[list[Path], Path]:
    """Split positional paths into sources and destination, exiting on misuse."""
    if len(paths) < 2:
        parser.print_usage()
        sys.exit(2)
    if len(paths) == 2:
        print("Missing destination")
        parser.print_usage()
        sys.exit(2)
    return paths[:-1], paths[-1]


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    sources, destination = split_paths(parser, args.paths)

    configure_logging(args.verbose)

    log_dir = args.log_dir or destination.absolute().parent
    sink = FileReportSink(log_dir, show_console=not args.quiet)
    engine = MergeEngine(sink, algorithm=args.algorithm, show_progress=not args.no_progress)

    print("=" * 60)
    print("DEDUP MERGER")
    print("=" * 60)
    for i, folder in enumerate(sources, start=1):
        print(f"Folder {i}: {folder.absolute()}")
    print(f"Output:   {destination.absolute()}")
    print(f"Logs:     {Path(log_dir).absolute()}")

    try:
        engine.run(sources, destination, log_dir=log_dir)
    except ValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted! The destination holds a partial merge.")
        sys.exit(1)

    for path in sink.written_logs():
        print(f"Log saved to: {path}")
