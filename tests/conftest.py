import io
import sys
from contextlib import suppress

import pytest
from loguru import logger

from licensegen_cli.prompts import Prompter


@pytest.fixture
def caplog(caplog):
    """Forward loguru records to pytest's caplog handler."""
    handler_id = logger.add(caplog.handler, format="{message}", level=0)
    yield caplog
    with suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_logger():
    """cli.main replaces loguru sinks; restore the default after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)


class Session:
    """A scripted operator: feeds answers and records what was asked."""

    def __init__(self, *answers):
        self.stdin = io.StringIO("".join(f"{answer}\n" for answer in answers))
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.prompter = Prompter(stdin=self.stdin, stdout=self.stdout, stderr=self.stderr)

    @property
    def asked(self):
        return self.stdout.getvalue()

    @property
    def complaints(self):
        return self.stderr.getvalue()

    def exhausted(self):
        return self.stdin.read() == ""


@pytest.fixture
def session():
    return Session
