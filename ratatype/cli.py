"""Command-line options and logging setup for Ratatype."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ratatype import __version__
from ratatype.core.config import MAX_WORD_LENGTH, MIN_WORD_LENGTH, SessionConfig, TextMode
from ratatype.core.controller import SessionController
from ratatype.core.errors import SessionConfigError
from ratatype.core.history import HistoryStore
from ratatype.core.sources import build_source, canonical_source_name

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("Must be a positive integer")
    if number <= 0:
        raise argparse.ArgumentTypeError("Must be a positive integer")
    return number


def _word_length(value: str) -> int:
    number = _positive_int(value)
    if number < MIN_WORD_LENGTH:
        raise argparse.ArgumentTypeError(f"Word length must be at least {MIN_WORD_LENGTH}")
    if number > MAX_WORD_LENGTH:
        raise argparse.ArgumentTypeError(f"Word length must be {MAX_WORD_LENGTH} or less")
    return number


def _text_source(value: str) -> str:
    try:
        return canonical_source_name(value)
    except SessionConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ratatype",
        description="A terminal typing test.",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=_positive_int,
        default=30,
        help="Duration of the typing test in seconds (default: 30).",
    )
    parser.add_argument(
        "-c",
        "--require-correction",
        action="store_true",
        help="Require errors to be corrected before proceeding.",
    )
    parser.add_argument(
        "-s",
        "--text-source",
        type=_text_source,
        default="common",
        help="Text source: common (frequent English words), system (/usr/share/dict/words), builtin (sample texts).",
    )
    parser.add_argument(
        "-m",
        "--max-word-length",
        type=_word_length,
        default=7,
        help=f"Maximum word length when using word lists ({MIN_WORD_LENGTH}-{MAX_WORD_LENGTH}, default: 7).",
    )
    parser.add_argument(
        "--code",
        metavar="FILE",
        type=Path,
        help="Practise typing lines from a source code file (press Enter to match line breaks).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> Tuple[SessionConfig, Optional[Path], bool]:
    """Parse command-line arguments into a session configuration.

    Returns ``(config, code_path, verbose)``; ``code_path`` is set only for
    code practice.
    """
    args = build_parser().parse_args(argv)
    mode = TextMode.CODE if args.code is not None else TextMode.NORMAL
    config = SessionConfig(
        duration_seconds=args.duration,
        require_correction=args.require_correction,
        mode=mode,
        text_source="code" if args.code is not None else args.text_source,
        max_word_length=args.max_word_length,
    )
    return config, args.code, args.verbose


def create_controller(argv: Optional[Sequence[str]] = None) -> SessionController:
    """Wire a session controller from command-line arguments.

    Finished sessions are appended to the CSV history file. The returned
    controller is idle; the front-end's event loop calls ``start()``.
    """
    config, code_path, verbose = parse_config(argv)
    configure_logging(verbose)
    source = build_source(config.text_source, code_path=code_path)
    history = HistoryStore()
    logger.debug(
        "Session config: %ss, correction=%s, source=%s", config.duration_seconds, config.require_correction, source.kind
    )
    return SessionController(source, config, on_finished=history.append)
