from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .pipeline.build_pipeline import run_pipeline
from .pipeline.state import PipelineState, SortConfig
from .tools.bibtex_io import read_bibtex, write_bibtex
from .tools.errors import BibSortError, IoError
from .tools.logger import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PARSE = 1
EXIT_USAGE = 2
EXIT_WRITE = 3

_DESCRIPTION = """\
Sort the entries of a bib file by citation key.

Entries are emitted exactly as written, only their order changes.
Comments and blank lines before an entry move together with it; text
before the first entry stays at the top.

Do NOT redirect into the input file (bib-sort refs.bib > refs.bib):
the shell truncates it before it is read. Use
    bib-sort refs.bib -o refs.bib
instead, which only replaces the file after it parsed without errors.
"""


def _env_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bib-sort",
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("bib_path", help="Path to the bib file")
    parser.add_argument(
        "-o",
        "--out",
        default=None,
        help="Write the sorted file here instead of stdout (may be the input file)",
    )
    parser.add_argument(
        "-c",
        "--case-sensitive",
        action="store_true",
        default=None,
        help="Make sorting case sensitive",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--sort-by-first-author-field",
        "--sbfaf",
        dest="sort_by",
        action="store_const",
        const="first_author",
        help="Sort by the first author as written in the author field",
    )
    mode.add_argument(
        "--sort-by-first-author-first-name",
        "--sbfafn",
        dest="sort_by",
        action="store_const",
        const="first_author_first_name",
        help='Sort by the first author with "Last, First" turned into "First Last"',
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser


def _build_config(args: argparse.Namespace) -> SortConfig:
    case_sensitive = args.case_sensitive
    if case_sensitive is None:
        case_sensitive = _env_bool("BIB_SORT_CASE_SENSITIVE", False)
    log_level = os.getenv("BIB_SORT_LOG_LEVEL", "WARNING")
    if args.verbose:
        log_level = "INFO"
    return SortConfig(
        input_path=args.bib_path,
        output_path=args.out,
        case_sensitive=case_sensitive,
        sort_by=args.sort_by or os.getenv("BIB_SORT_SORT_BY", "key"),
        log_level=log_level,
    )


def _report(exc: BibSortError) -> None:
    print(f"error: {exc.kind}: {exc}", file=sys.stderr)


def _write_stdout(text: str) -> None:
    try:
        sys.stdout.write(text)
        sys.stdout.flush()
    except BrokenPipeError:
        # reader went away (e.g. "| head"); silence the flush at interpreter exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        config = _build_config(args)
    except ValidationError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE
    setup_logging(config.log_level)

    # read-all, parse-all, then write: a failure must never touch the output file
    try:
        text = read_bibtex(config.input_path, config.encoding)
        logger.info("Read %s (%d characters)", config.input_path, len(text))
        state = run_pipeline(PipelineState(config=config, source_text=text))
    except BibSortError as exc:
        _report(exc)
        return EXIT_PARSE

    if config.output_path is None:
        _write_stdout(state.output_text)
        return EXIT_OK
    try:
        write_bibtex(config.output_path, state.output_text, config.encoding)
    except IoError as exc:
        _report(exc)
        return EXIT_WRITE
    logger.info("Wrote %d entries to %s", len(state.sorted_entries), config.output_path)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
