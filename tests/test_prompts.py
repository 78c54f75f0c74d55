"""Tests for licensegen_cli/prompts.py - prompt loop and per-license question order"""

import io

import pytest

from licensegen_cli.catalog import resolve
from licensegen_cli.errors import PromptClosedError, PromptIOError
from licensegen_cli.prompts import (
    Q_DESCRIPTION,
    Q_FULLNAME,
    Q_INTERACTIVE,
    Q_ORGANIZATION,
    Q_PROGRAM,
    Q_SECONDARY,
    Q_SIGNED,
    Q_VERSION,
    Q_WEBSITE,
    Q_YEAR,
    Answers,
    Prompter,
    SignedRelease,
    collect_answers,
    parse_bool,
    parse_day,
    parse_text,
    parse_year,
    split_list,
)


@pytest.mark.unit
class TestParsers:
    def test_parse_year(self):
        assert parse_year("2025") == 2025
        for bad in ("", "twenty", "0", "10000", "-1"):
            with pytest.raises(ValueError):
                parse_year(bad)

    def test_parse_day(self):
        assert parse_day("7") == 7
        with pytest.raises(ValueError):
            parse_day("32")

    def test_parse_text_rejects_blank(self):
        assert parse_text("  Road Runner ") == "Road Runner"
        with pytest.raises(ValueError):
            parse_text("   ")

    @pytest.mark.parametrize("raw", ["y", "YES", "t", "True"])
    def test_parse_bool_true(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["n", "No", "f", "FALSE"])
    def test_parse_bool_false(self, raw):
        assert parse_bool(raw) is False

    def test_split_list_keeps_order_and_duplicates(self):
        assert split_list("MIT, Apache-2.0,MIT , ,") == ["MIT", "Apache-2.0", "MIT"]


@pytest.mark.unit
class TestPrompter:
    def test_required_reasks_until_valid(self, session):
        s = session("soon", "", "2025")
        assert s.prompter.ask_required(Q_YEAR, parse_year) == 2025
        assert s.asked.count(f"{Q_YEAR}: ") == 3
        assert "Invalid input: soon." in s.complaints
        assert "Please try again." in s.complaints

    def test_optional_blank_is_absent(self, session):
        s = session("")
        assert s.prompter.ask_optional(Q_VERSION, parse_text) is None
        assert s.asked == f"{Q_VERSION} (optional): "

    def test_optional_reasks_on_invalid_value(self, session):
        s = session("abc", "12")
        assert s.prompter.ask_optional("Enter a number", int) == 12
        assert "leave blank for none" in s.complaints

    def test_bool_reasks_on_garbage(self, session):
        s = session("maybe", "y")
        assert s.prompter.ask_bool(Q_SIGNED) is True
        assert s.asked.count(f"{Q_SIGNED} ([y]es/[n]o): ") == 2
        assert "Please answer 'yes' or 'no'." in s.complaints

    def test_optional_bool(self, session):
        s = session("", "sure", "no")
        assert s.prompter.ask_optional_bool("Enable?") is None
        assert s.prompter.ask_optional_bool("Enable?") is False

    def test_list_blank_is_empty(self, session):
        s = session("")
        assert s.prompter.ask_list(Q_SECONDARY) == []

    def test_closed_channel_is_fatal(self, session):
        s = session()
        with pytest.raises(PromptClosedError) as excinfo:
            s.prompter.ask_required(Q_YEAR, parse_year)
        assert excinfo.value.question == Q_YEAR

    def test_undecodable_input_is_fatal(self):
        stdin = io.TextIOWrapper(io.BytesIO(b"2025\n\xff\xfeName\n"), encoding="utf-8")
        prompter = Prompter(stdin=stdin, stdout=io.StringIO(), stderr=io.StringIO())
        with pytest.raises(PromptIOError) as excinfo:
            prompter.ask_required(Q_YEAR, parse_year)
            prompter.ask_required(Q_FULLNAME, parse_text)
        assert isinstance(excinfo.value.cause, UnicodeDecodeError)

    def test_broken_output_stream_is_fatal(self):
        class ClosedPipe(io.StringIO):
            def flush(self):
                raise BrokenPipeError("stdout closed")

        prompter = Prompter(stdin=io.StringIO("2025\n"), stdout=ClosedPipe(), stderr=io.StringIO())
        with pytest.raises(PromptIOError) as excinfo:
            prompter.ask_required(Q_YEAR, parse_year)
        assert excinfo.value.question == Q_YEAR

    def test_closed_channel_while_retrying(self, session):
        s = session("not a year")
        with pytest.raises(PromptClosedError):
            s.prompter.ask_required(Q_YEAR, parse_year)


@pytest.mark.unit
class TestCollectAnswers:
    @pytest.mark.parametrize(
        "license_id",
        ["MIT", "Apache-2.0", "BSL-1.0", "Unlicense", "CDDL-1.0", "MPL-2.0", "BSD-3-Clause",
         "BSD-3-Clause-Modification", "BSD-3-Clause-No-Military-License"],
    )
    def test_basic_licenses_ask_year_and_name(self, session, license_id):
        s = session("2025", "Your Name")
        answers = collect_answers(resolve(license_id), s.prompter)
        assert answers == Answers(year=2025, fullname="Your Name")
        assert s.asked == f"{Q_YEAR}: {Q_FULLNAME}: "
        assert s.exhausted()

    def test_bsd_attribution_asks_organization_then_website(self, session):
        s = session("2025", "Your Name", "ACME, Inc.", "https://acme.example.com")
        answers = collect_answers(resolve("BSD-3-Clause-Attribution"), s.prompter)
        assert answers.organization == "ACME, Inc."
        assert answers.website == "https://acme.example.com"
        assert s.asked.index(Q_ORGANIZATION) < s.asked.index(Q_WEBSITE)
        assert f"{Q_ORGANIZATION} (optional): " in s.asked

    def test_bsd_attribution_optional_fields_can_be_blank(self, session):
        s = session("2025", "Your Name", "", "")
        answers = collect_answers(resolve("BSD-3-Clause-Attribution"), s.prompter)
        assert answers.organization is None
        assert answers.website is None

    @pytest.mark.parametrize("license_id", ["LGPL-3.0", "LGPL-3.0-only", "LGPL-3.0-or-later"])
    def test_lgpl_skips_version_and_interactive(self, session, license_id):
        s = session("2025", "Your Name", "license", "n")
        answers = collect_answers(resolve(license_id), s.prompter)
        assert Q_VERSION not in s.asked
        assert Q_INTERACTIVE not in s.asked
        assert Q_DESCRIPTION not in s.asked
        assert answers.program == "license"
        assert answers.interactive is False
        assert answers.signed_release is None
        assert s.exhausted()

    @pytest.mark.parametrize("license_id", ["AGPL-3.0", "GPL-3.0-only", "GPL-3.0-or-later"])
    def test_gpl_asks_version_and_interactive_before_signing(self, session, license_id):
        s = session("2025", "Your Name", "license", "1.0.0", "A tool for managing licenses", "y", "no")
        answers = collect_answers(resolve(license_id), s.prompter)
        asked = s.asked
        assert asked.index(Q_PROGRAM) < asked.index(Q_VERSION) < asked.index(Q_INTERACTIVE) < asked.index(Q_SIGNED)
        assert answers.version == "1.0.0"
        assert answers.description == "A tool for managing licenses"
        assert answers.interactive is True
        assert answers.signed_release is None
        assert s.exhausted()

    def test_signed_release_collects_signature(self, session):
        s = session(
            "2025", "Your Name", "license", "", "A tool for managing licenses", "n",
            "yes", "ACME, Inc.", "Road Runner", "The Boss", "7", "April", "2025",
        )
        answers = collect_answers(resolve("GPL-3.0-or-later"), s.prompter)
        assert answers.version is None
        assert answers.signed_release == SignedRelease(
            organization="ACME, Inc.",
            signer="Road Runner",
            signer_title="The Boss",
            day=7,
            month="April",
            year=2025,
        )
        assert s.exhausted()

    def test_epl_asks_only_for_secondary_licenses(self, session):
        s = session("MIT, Apache-2.0")
        answers = collect_answers(resolve("EPL-2.0"), s.prompter)
        assert answers.secondary_licenses == ("MIT", "Apache-2.0")
        assert answers.year is None
        assert s.asked == f"{Q_SECONDARY} (optional): "
