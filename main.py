"""Silky script translation merger.

Launch with: python main.py SRC_DIR TL_DIR OUT_DIR
"""

import argparse
import logging
import sys

from silkymerge.config import DEFAULT_LOG_FILE, DEFAULT_MAX_ERRORS, MergeSettings
from silkymerge.diagnostics import MergeError
from silkymerge.translation_engine import BatchRunner

log = logging.getLogger("silkymerge")


class SeverityFormatter(logging.Formatter):
    """Plain message lines with ``[ERROR]`` / ``[WARNING]`` prefixes."""

    _PREFIXES = {
        logging.WARNING: "[WARNING] ",
        logging.ERROR: "[ERROR] ",
        logging.CRITICAL: "[ERROR] ",
    }

    def format(self, record: logging.LogRecord) -> str:
        return self._PREFIXES.get(record.levelno, "") + super().format(record)


def setup_logging(log_file: str, verbose: bool = False):
    """Log file for the run, mirrored to stderr."""
    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in (file_handler, stream_handler):
        handler.setFormatter(SeverityFormatter("%(message)s"))
    logging.basicConfig(level=logging.DEBUG, handlers=[file_handler, stream_handler],
                        force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="silkymerge",
        description="Merge a human translation back into disassembled Silky scripts.")
    parser.add_argument("dirs", nargs="*", metavar="DIR",
                        help="script source dir, translation dir, output dir")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE,
                        help="diagnostics log (default: %(default)s)")
    parser.add_argument("--max-errors", type=int, default=DEFAULT_MAX_ERRORS,
                        help="abandon a file after this many write errors (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="also trace debug output to stderr")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    if len(args.dirs) != 3:
        log.info("Usage: silkymerge [src dir] [eng dir] [out dir]")
        return 0

    settings = MergeSettings(log_file=args.log_file, max_errors=args.max_errors)
    runner = BatchRunner(*args.dirs, settings=settings)
    try:
        runner.run()
    except MergeError as e:
        log.error("%s", e.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
