"""Render license texts, SPDX comment blocks and companion notices."""
from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from typing import Callable, Dict, Mapping, Optional, Sequence

from loguru import logger

from .catalog import BsdAmendment, LicenseFamily, LicenseVariant
from .errors import TemplateError
from .prompts import Answers

Context = Dict[str, str]
ValueProvider = Callable[[Context], str]

PACKAGE_NAME = __package__ or "licensegen_cli"
LICENSES_ROOT = resources.files(PACKAGE_NAME) / "data" / "licenses"

FOURTH_CLAUSE_MARKER = "<fourth clause>"
POSTAMBLE_MARKER = "<postamble>"
GNU_TAGLINE_TOKEN = "<one line to give the program's name and a brief idea of what it does.>"

EPL_SECONDARY_NOTICE = """\
This Source Code may also be made available under the following
Secondary Licenses when the conditions for such availability set
forth in the Eclipse Public License, v. 2.0 are satisfied:
{entries}"""

SIGNED_RELEASE_DISCLAIMER = """\
{organization}, hereby disclaims all copyright interest in the program
`{program}' written by {fullname}.

<signature of {signer}>, {signing_day} {signing_month} {signing_year}
{signer}, {signer_title}"""

INTERACTIVE_NOTICE = """\
{program_version}, Copyright (C) {year} {fullname}
{program} comes with ABSOLUTELY NO WARRANTY. This is free software, and you
are welcome to redistribute it under certain conditions."""


@dataclass(frozen=True)
class RenderedLicense:
    text: str
    comment: str
    alt: Optional[str] = None
    interactive: Optional[str] = None


@dataclass(frozen=True)
class ReplacementSpec:
    tokens: Sequence[str]
    value: ValueProvider | str


@dataclass(frozen=True)
class TemplateSpec:
    filename: str
    replacements: Sequence[ReplacementSpec] = ()
    preamble_template: Optional[str] = None
    copyright_template: Optional[str] = None

    def template_resource(self) -> resources.abc.Traversable:
        return LICENSES_ROOT / self.filename


@dataclass(frozen=True)
class BsdFragment:
    fourth: str = ""
    postamble: str = ""


BSD_FRAGMENTS: Mapping[BsdAmendment, BsdFragment] = {
    BsdAmendment.NONE: BsdFragment(),
    BsdAmendment.ATTRIBUTION: BsdFragment(
        fourth=(
            "4. Redistributions of any form whatsoever must retain the following\n"
            "   acknowledgment: 'This product includes software developed by\n"
            "   {acknowledged}.'"
        ),
    ),
    BsdAmendment.MODIFICATION: BsdFragment(
        fourth=(
            "4. If any files are modified, you must cause the modified files to\n"
            "   carry prominent notices stating that you changed the files and the\n"
            "   date of any change."
        ),
    ),
    BsdAmendment.NO_MILITARY: BsdFragment(
        postamble=(
            "\n"
            "YOU ACKNOWLEDGE THAT THIS SOFTWARE IS NOT DESIGNED, LICENSED OR INTENDED\n"
            "FOR USE IN THE DESIGN, CONSTRUCTION, OPERATION OR MAINTENANCE OF ANY\n"
            "MILITARY FACILITY."
        ),
    ),
}


def fragment_for(amendment: BsdAmendment) -> BsdFragment:
    return BSD_FRAGMENTS[amendment]


def _require(context: Context, key: str) -> str:
    try:
        return context[key]
    except KeyError as exc:
        raise TemplateError(f"Missing value '{key}' required by this template") from exc


def program_tagline(context: Context) -> str:
    program = _require(context, "program")
    description = context.get("description")
    if description:
        return f"{program} - {description}"
    return program


GNU_COPYRIGHT = "Copyright (C) {year} {fullname}"
PLAIN_COPYRIGHT = "Copyright (c) {year} {fullname}."
GNU_APPENDIX = (
    ReplacementSpec((GNU_TAGLINE_TOKEN,), program_tagline),
    ReplacementSpec(("<year>",), "year"),
    ReplacementSpec(("<name of author>",), "fullname"),
)

TEMPLATE_SPECS: Mapping[LicenseFamily, TemplateSpec] = {
    LicenseFamily.MIT: TemplateSpec(
        filename="MIT.txt",
        replacements=(
            ReplacementSpec(("<year>",), "year"),
            ReplacementSpec(("<copyright holders>",), "fullname"),
        ),
    ),
    LicenseFamily.BSD3: TemplateSpec(
        filename="BSD-3-Clause.txt",
        replacements=(
            ReplacementSpec(("<year>",), "year"),
            ReplacementSpec(("<owner>",), "fullname"),
        ),
    ),
    LicenseFamily.APACHE2: TemplateSpec(
        filename="Apache-2.0.txt",
        replacements=(
            ReplacementSpec(("[yyyy]",), "year"),
            ReplacementSpec(("[name of copyright owner]",), "fullname"),
        ),
        copyright_template="Copyright {year} {fullname}",
    ),
    LicenseFamily.BSL1: TemplateSpec(
        filename="BSL-1.0.txt",
        preamble_template="Copyright (c) {year} {fullname}",
        copyright_template=PLAIN_COPYRIGHT,
    ),
    LicenseFamily.UNLICENSE: TemplateSpec(filename="Unlicense.txt", copyright_template=PLAIN_COPYRIGHT),
    LicenseFamily.CDDL1: TemplateSpec(filename="CDDL-1.0.txt", copyright_template=PLAIN_COPYRIGHT),
    LicenseFamily.MPL2: TemplateSpec(filename="MPL-2.0.txt", copyright_template=PLAIN_COPYRIGHT),
    LicenseFamily.EPL2: TemplateSpec(filename="EPL-2.0.txt"),
    LicenseFamily.GPL3: TemplateSpec(
        filename="GPL-3.0.txt",
        replacements=GNU_APPENDIX + (ReplacementSpec(("<program>",), "program"),),
        copyright_template=GNU_COPYRIGHT,
    ),
    LicenseFamily.AGPL3: TemplateSpec(
        filename="AGPL-3.0.txt",
        replacements=GNU_APPENDIX,
        copyright_template=GNU_COPYRIGHT,
    ),
    LicenseFamily.LGPL3: TemplateSpec(
        filename="LGPL-3.0.txt",
        preamble_template="{program}\nCopyright (C) {year} {fullname}",
        copyright_template=GNU_COPYRIGHT,
    ),
}


def load_license_text(spec: TemplateSpec) -> str:
    resource = spec.template_resource()
    if not resource.is_file():
        raise TemplateError(f"Template file not found: {spec.filename}")
    return resource.read_text(encoding="utf-8")


def evaluate_value(provider: ValueProvider | str, context: Context) -> str:
    if callable(provider):
        return provider(context)
    return _require(context, provider)


def apply_replacements(text: str, replacements: Sequence[ReplacementSpec], context: Context) -> str:
    for repl in replacements:
        value = evaluate_value(repl.value, context)
        for token in repl.tokens:
            if token not in text:
                raise TemplateError(f"Template has no '{token}' placeholder")
            text = text.replace(token, value)
    return text


def format_template(template: str, context: Context) -> str:
    try:
        return template.format_map(context)
    except KeyError as exc:
        missing = exc.args[0]
        raise TemplateError(f"Missing value '{missing}' required by this template") from exc
    except (IndexError, ValueError) as exc:
        raise TemplateError(f"Malformed template: {exc}") from exc


def append_preamble(text: str, template: str, context: Context) -> str:
    rendered = format_template(template, context).strip()
    if rendered:
        return f"{rendered}\n\n{text}"
    return text


def splice(text: str, marker: str, fragment: str) -> str:
    """Replace a marker line with a fragment, dropping the line when the fragment is empty."""
    if marker not in text:
        raise TemplateError(f"Template has no '{marker}' marker")
    if fragment:
        return text.replace(marker, fragment)
    return text.replace(f"{marker}\n", "").replace(marker, "")


def build_context(answers: Answers) -> Context:
    context: Context = {}
    for key in ("fullname", "program", "version", "description", "organization", "website"):
        value = getattr(answers, key)
        if value:
            context[key] = value
    if answers.year is not None:
        context["year"] = str(answers.year)
    if "fullname" in context:
        acknowledged = f'"{answers.organization or answers.fullname}"'
        if answers.website:
            acknowledged = f"{acknowledged} ({answers.website})"
        context["acknowledged"] = acknowledged
    if answers.program:
        context["program_version"] = (
            f"{answers.program} version {answers.version}" if answers.version else answers.program
        )
    release = answers.signed_release
    if release is not None:
        context.update(
            {
                "organization": release.organization,
                "signer": release.signer,
                "signer_title": release.signer_title,
                "signing_day": str(release.day),
                "signing_month": release.month,
                "signing_year": str(release.year),
            }
        )
    return context


def render_text(variant: LicenseVariant, spec: TemplateSpec, context: Context) -> str:
    text = load_license_text(spec)
    if spec.replacements:
        text = apply_replacements(text, spec.replacements, context)
    if variant.family is LicenseFamily.BSD3:
        fragment = fragment_for(variant.amendment)
        text = splice(text, FOURTH_CLAUSE_MARKER, format_template(fragment.fourth, context))
        text = splice(text, POSTAMBLE_MARKER, fragment.postamble)
    if spec.preamble_template:
        text = append_preamble(text, spec.preamble_template, context)
    if not text.endswith("\n"):
        text += "\n"
    return text


def render_comment(variant: LicenseVariant, spec: TemplateSpec, context: Context) -> str:
    lines = [f"SPDX-License-Identifier: {variant.spdx_id}"]
    if spec.copyright_template:
        lines.append(format_template(spec.copyright_template, context))
    return "\n".join(lines)


def render_alt(variant: LicenseVariant, answers: Answers, context: Context) -> Optional[str]:
    if variant.family is LicenseFamily.EPL2 and answers.secondary_licenses:
        entries = "\n".join(f"- {entry}" for entry in answers.secondary_licenses)
        return EPL_SECONDARY_NOTICE.format(entries=entries)
    if variant.is_gnu and answers.signed_release is not None:
        return format_template(SIGNED_RELEASE_DISCLAIMER, context)
    return None


def render_interactive(variant: LicenseVariant, answers: Answers, context: Context) -> Optional[str]:
    if variant.family not in (LicenseFamily.AGPL3, LicenseFamily.GPL3) or not answers.interactive:
        return None
    return format_template(INTERACTIVE_NOTICE, context)


def render(variant: LicenseVariant, answers: Answers) -> RenderedLicense:
    """Produce the license text and companion notices for ``variant``.

    Raises :class:`TemplateError` when a built-in template is broken or an
    answer the template needs was never collected.
    """
    spec = TEMPLATE_SPECS[variant.family]
    context = build_context(answers)
    rendered = RenderedLicense(
        text=render_text(variant, spec, context),
        comment=render_comment(variant, spec, context),
        alt=render_alt(variant, answers, context),
        interactive=render_interactive(variant, answers, context),
    )
    logger.debug("Rendered {} ({} characters)", variant, len(rendered.text))
    return rendered
