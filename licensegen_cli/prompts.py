"""Blocking question/answer exchange used to fill license templates."""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO, Tuple, TypeVar

from loguru import logger

from .catalog import BsdAmendment, LicenseFamily, LicenseVariant
from .errors import PromptClosedError, PromptIOError

T = TypeVar("T")
Parser = Callable[[str], T]

TRUE_ANSWERS = ("yes", "y", "true", "t")
FALSE_ANSWERS = ("no", "n", "false", "f")

Q_YEAR = "Enter the copyright year"
Q_FULLNAME = "Enter the full name of the copyright holder"
Q_ORGANIZATION = "Enter the name of the organization"
Q_WEBSITE = "Enter the website of the organization"
Q_PROGRAM = "Enter the name of the program"
Q_VERSION = "Enter the version of the program"
Q_DESCRIPTION = "Enter a short description of the program (5-10 words)"
Q_INTERACTIVE = "Is this program interactive? (e.g., a website, CLI tool, etc.)"
Q_SIGNED = "Do you need a signed release for this software? (e.g., for an organization)"
Q_SIGNER = "Enter the name of the signer from the organization"
Q_SIGNER_TITLE = "Enter the position within the organization of the signer"
Q_SIGN_DAY = "Enter the day of the signing"
Q_SIGN_MONTH = "Enter the month of the signing"
Q_SIGN_YEAR = "Enter the year of the signing"
Q_SECONDARY = "Enter the secondary licenses that are permitted (comma separated)"


def parse_text(raw: str) -> str:
    value = raw.strip()
    if not value:
        raise ValueError("a value is required")
    return value


def parse_year(raw: str) -> int:
    year = int(raw)
    if not 1 <= year <= 9999:
        raise ValueError(f"{year} is not a valid year")
    return year


def parse_day(raw: str) -> int:
    day = int(raw)
    if not 1 <= day <= 31:
        raise ValueError(f"{day} is not a valid day of the month")
    return day


def parse_bool(raw: str) -> bool:
    answer = raw.strip().lower()
    if answer in TRUE_ANSWERS:
        return True
    if answer in FALSE_ANSWERS:
        return False
    raise ValueError(f"expected yes or no, got '{raw}'")


def split_list(raw: str) -> List[str]:
    """Split a comma separated answer, keeping order and duplicates."""
    return [item.strip() for item in raw.split(",") if item.strip()]


class Prompter:
    """Ask questions over a pair of text streams.

    Any line-oriented transport works: the defaults are the process streams,
    tests pass ``io.StringIO`` objects. Reaching end of input is fatal and
    raises :class:`PromptClosedError`; undecodable input or a failing
    stream raises :class:`PromptIOError`.
    """

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def _read(self, prompt: str, question: str) -> str:
        try:
            self.stdout.write(prompt)
            self.stdout.flush()
            line = self.stdin.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise PromptIOError(question, exc) from exc
        if not line:
            raise PromptClosedError(question)
        return line.strip()

    def _complain(self, raw: str, hint: str) -> None:
        print(f"Invalid input: {raw}.", file=self.stderr)
        print(hint, file=self.stderr)

    def ask_required(self, question: str, parse: Parser[T]) -> T:
        prompt = f"{question}: "
        while True:
            raw = self._read(prompt, question)
            try:
                return parse(raw)
            except ValueError as exc:
                logger.debug("Rejected answer {!r} to {!r}: {}", raw, question, exc)
                self._complain(raw, "Please try again.")

    def ask_optional(self, question: str, parse: Parser[T]) -> Optional[T]:
        prompt = f"{question} (optional): "
        while True:
            raw = self._read(prompt, question)
            if not raw:
                return None
            try:
                return parse(raw)
            except ValueError as exc:
                logger.debug("Rejected answer {!r} to {!r}: {}", raw, question, exc)
                self._complain(raw, "Please try again or leave blank for none.")

    def ask_bool(self, question: str) -> bool:
        prompt = f"{question} ([y]es/[n]o): "
        while True:
            raw = self._read(prompt, question)
            try:
                return parse_bool(raw)
            except ValueError:
                print("Please answer 'yes' or 'no'.", file=self.stderr)

    def ask_optional_bool(self, question: str) -> Optional[bool]:
        prompt = f"{question} ([y]es/[n]o) (optional): "
        while True:
            raw = self._read(prompt, question)
            if not raw:
                return None
            try:
                return parse_bool(raw)
            except ValueError:
                print("Please answer 'yes', 'no', or leave blank for none.", file=self.stderr)

    def ask_list(self, question: str) -> List[str]:
        answer = self.ask_optional(question, split_list)
        return answer or []


@dataclass(frozen=True)
class SignedRelease:
    organization: str
    signer: str
    signer_title: str
    day: int
    month: str
    year: int


@dataclass(frozen=True)
class Answers:
    year: Optional[int] = None
    fullname: Optional[str] = None
    organization: Optional[str] = None
    website: Optional[str] = None
    program: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    interactive: bool = False
    signed_release: Optional[SignedRelease] = None
    secondary_licenses: Tuple[str, ...] = field(default_factory=tuple)


def ask_signed_release(prompter: Prompter) -> Optional[SignedRelease]:
    if not prompter.ask_bool(Q_SIGNED):
        return None
    return SignedRelease(
        organization=prompter.ask_required(Q_ORGANIZATION, parse_text),
        signer=prompter.ask_required(Q_SIGNER, parse_text),
        signer_title=prompter.ask_required(Q_SIGNER_TITLE, parse_text),
        day=prompter.ask_required(Q_SIGN_DAY, parse_day),
        month=prompter.ask_required(Q_SIGN_MONTH, parse_text),
        year=prompter.ask_required(Q_SIGN_YEAR, parse_year),
    )


def collect_answers(variant: LicenseVariant, prompter: Prompter) -> Answers:
    """Ask the questions the variant's template needs, in a fixed order."""
    logger.debug("Collecting answers for {}", variant)
    if variant.family is LicenseFamily.EPL2:
        secondary = prompter.ask_list(Q_SECONDARY)
        return Answers(secondary_licenses=tuple(secondary))

    year = prompter.ask_required(Q_YEAR, parse_year)
    fullname = prompter.ask_required(Q_FULLNAME, parse_text)

    if variant.is_gnu:
        program = prompter.ask_required(Q_PROGRAM, parse_text)
        version = description = None
        interactive = False
        if variant.family is not LicenseFamily.LGPL3:
            version = prompter.ask_optional(Q_VERSION, parse_text)
            description = prompter.ask_required(Q_DESCRIPTION, parse_text)
            interactive = prompter.ask_bool(Q_INTERACTIVE)
        return Answers(
            year=year,
            fullname=fullname,
            program=program,
            version=version,
            description=description,
            interactive=interactive,
            signed_release=ask_signed_release(prompter),
        )

    if variant.amendment is BsdAmendment.ATTRIBUTION:
        organization = prompter.ask_optional(Q_ORGANIZATION, parse_text)
        website = prompter.ask_optional(Q_WEBSITE, parse_text)
        return Answers(year=year, fullname=fullname, organization=organization, website=website)

    return Answers(year=year, fullname=fullname)
