#!/usr/bin/env python3
"""Interactive license generator with SPDX source annotation."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from . import __version__
from .catalog import LicenseVariant, all_variants, describe, resolve
from .errors import ParseError, PromptClosedError, PromptIOError, TemplateError, WriteError
from .prompts import Prompter, collect_answers
from .render import render
from .writer import Settings, output

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERNAL = 3
LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def license_argument(value: str) -> LicenseVariant:
    try:
        return resolve(value)
    except ParseError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def display_license_list(variants: Sequence[LicenseVariant]) -> None:
    width = max(len(str(variant)) for variant in variants)
    for variant in variants:
        print(f"{str(variant).ljust(width)} - {describe(variant)}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="licensegen",
        description="Generate a license file and add SPDX headers to your sources.",
    )
    parser.add_argument(
        "license",
        nargs="?",
        type=license_argument,
        help="License identifier (e.g. MIT, GPL-3.0-or-later, BSD-3-Clause-Attribution)",
    )
    parser.add_argument(
        "-c",
        "--add-comment",
        action="store_true",
        help="Add the license header to the source files instead of only printing it",
    )
    parser.add_argument("--comment", default="//", help="Comment marker for the header (default: //)")
    parser.add_argument(
        "-s",
        "--source-path",
        default="src",
        help="File or directory to add the license header to (default: src)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="LICENSE.txt",
        help="Write the license text to this path (default: LICENSE.txt)",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Descend into subdirectories of the source path",
    )
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Leave files that already start with the license header untouched",
    )
    parser.add_argument("--list", action="store_true", help="List supported licenses and exit")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log output (repeatable)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = "ERROR"
    elif verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    else:
        level = "WARNING"
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


def build_settings(args: argparse.Namespace) -> Settings:
    return Settings(
        add_comment=args.add_comment,
        comment=args.comment,
        source_path=Path(args.source_path).expanduser(),
        output=Path(args.output).expanduser(),
        recursive=args.recursive,
        skip_existing=args.skip_existing,
    )


def run(variant: LicenseVariant, settings: Settings, prompter: Optional[Prompter] = None) -> int:
    prompter = prompter if prompter is not None else Prompter()
    logger.info("Generating {}", variant)
    try:
        answers = collect_answers(variant, prompter)
        rendered = render(variant, answers)
        output(rendered, settings, stream=prompter.stdout)
    except (PromptClosedError, PromptIOError) as exc:
        logger.error("{}", exc)
        return EXIT_FAILURE
    except WriteError as exc:
        logger.error("{}", exc)
        return EXIT_FAILURE
    except TemplateError as exc:
        logger.critical("Failed to render license: {}", exc)
        return EXIT_INTERNAL
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    if args.list:
        display_license_list(all_variants())
        return EXIT_OK
    if args.license is None:
        print("No license specified. Use --list to see available options.", file=sys.stderr)
        return EXIT_FAILURE
    return run(args.license, build_settings(args))


if __name__ == "__main__":
    raise SystemExit(main())
