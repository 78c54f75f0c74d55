"""Exceptions raised by the license generator."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class LicenseGenError(Exception):
    """Base class for every error raised by licensegen_cli."""


class ParseError(LicenseGenError, ValueError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unsupported license '{token}'. Use --list to see supported identifiers.")


class PromptClosedError(LicenseGenError):
    """The operator channel reached end of input while a question was pending."""

    def __init__(self, question: str) -> None:
        self.question = question
        super().__init__(f"Input closed while waiting for: {question}")


class PromptIOError(LicenseGenError):
    """Reading an answer or writing a question failed."""

    def __init__(self, question: str, cause: BaseException) -> None:
        self.question = question
        self.cause = cause
        super().__init__(f"Failed to read line for '{question}': {cause}")


class TemplateError(LicenseGenError):
    """A built-in template is malformed or a required value is missing.

    This signals a defect in the package itself, never bad operator input.
    """


class WriteError(LicenseGenError):
    def __init__(self, message: str, path: Path, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        detail = f"{message} {path}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
