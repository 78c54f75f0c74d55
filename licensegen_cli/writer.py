"""Persist rendered licenses and prepend SPDX headers to source files."""
from __future__ import annotations

import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from loguru import logger

from .errors import WriteError
from .render import RenderedLicense

COMMENT_FRAMING = "Add this as a comment to the top of your source file(s):\n"
ALT_FRAMING = """
You'll need to include the following amendment to your license.
This is usually added to the end of the license file, but there is no strict requirement
for where it goes. Another common place is to add it as a comment at the top of your source
files or to the readme.
"""
INTERACTIVE_FRAMING = """
Since your program is interactive, you should also include the following notice in your program's output.
This needs to be easily accessible to users, such as in a help command, at the start of the program, in
a footer section, or in an about section.
"""


@dataclass(frozen=True)
class Settings:
    add_comment: bool = False
    comment: str = "//"
    source_path: Path = Path("src")
    output: Path = Path("LICENSE.txt")
    recursive: bool = False
    skip_existing: bool = False


def comment_block(prefix: str, spdx_block: str) -> str:
    """Prefix every line of the SPDX block with the comment marker and a space."""
    return "".join(f"{prefix} {line}\n" for line in spdx_block.splitlines())


def encode_text(text: str, message: str, path: Path) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise WriteError(message, path, exc) from exc


def persist(rendered: RenderedLicense, output_path: Path) -> None:
    path = Path(output_path)
    data = encode_text(rendered.text, "Failed to encode license text for", path)
    try:
        handle = open(path, "wb")
    except OSError as exc:
        raise WriteError("Failed to open license file", path, exc) from exc
    try:
        handle.write(data)
        handle.flush()
    except OSError as exc:
        raise WriteError("Failed to write license text to", path, exc) from exc
    finally:
        handle.close()
    logger.info("Wrote license text to {}", path)


def write_comment(header: bytes, path: Path, skip_existing: bool = False) -> bool:
    """Prepend ``header`` to ``path`` through a temporary file and an atomic rename.

    Returns False when ``skip_existing`` is set and the file already starts
    with the header. A symlink is followed and the file it points to is
    rewritten; the link itself stays in place. The temporary file never
    outlives this call unless the process itself is killed.
    """
    tmp_path: Optional[Path] = None
    renamed = False
    try:
        real = path.resolve(strict=True)
        with open(real, "rb") as src:
            if skip_existing and src.read(len(header)) == header:
                logger.info("Skipping {} (header already present)", path)
                return False
            src.seek(0)
            with tempfile.NamedTemporaryFile(
                dir=real.parent,
                prefix=f".{real.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(header)
                shutil.copyfileobj(src, tmp)
                tmp.flush()
                os.fsync(tmp.fileno())
        shutil.copymode(real, tmp_path)
        os.replace(tmp_path, real)
        renamed = True
    except OSError as exc:
        raise WriteError("Failed to write comment for file", path, exc) from exc
    finally:
        if tmp_path is not None and not renamed:
            tmp_path.unlink(missing_ok=True)
    logger.debug("Prepended {} bytes to {}", len(header), path)
    return True


def iterate_dir(directory: Path, header: bytes, recursive: bool, skip_existing: bool) -> List[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        raise WriteError("Failed to read directory", directory, exc) from exc
    annotated: List[Path] = []
    for entry in entries:
        if entry.is_dir():
            if recursive and not entry.is_symlink():
                annotated.extend(iterate_dir(entry, header, recursive, skip_existing))
            else:
                logger.warning("Skipping directory {}", entry)
            continue
        if not entry.is_file():
            raise WriteError("Entry is neither a file nor a directory:", entry)
        if write_comment(header, entry, skip_existing):
            annotated.append(entry)
    return annotated


def annotate(
    comment_prefix: str,
    spdx_block: str,
    target: Path,
    *,
    recursive: bool = False,
    skip_existing: bool = False,
) -> List[Path]:
    """Prepend the commented SPDX block to a file or to the files of a directory.

    Directories are processed one level deep unless ``recursive`` is set.
    The first failure stops processing. Returns the annotated paths.
    """
    target = Path(target)
    header = encode_text(comment_block(comment_prefix, spdx_block), "Failed to encode license header for", target)
    if target.is_dir():
        return iterate_dir(target, header, recursive, skip_existing)
    if target.is_file():
        return [target] if write_comment(header, target, skip_existing) else []
    if not target.exists() and not target.is_symlink():
        raise WriteError("Source path does not exist:", target)
    raise WriteError("Source path is neither a file nor a directory:", target)


def output(rendered: RenderedLicense, settings: Settings, stream: Optional[TextIO] = None) -> None:
    """Annotate sources, write the license file, then show follow-up notices."""
    stream = stream if stream is not None else sys.stdout
    if settings.add_comment:
        annotated = annotate(
            settings.comment,
            rendered.comment,
            settings.source_path,
            recursive=settings.recursive,
            skip_existing=settings.skip_existing,
        )
        logger.info("Added the license header to {} file(s)", len(annotated))
    else:
        print(COMMENT_FRAMING, file=stream)
        stream.write(comment_block(settings.comment, rendered.comment))

    persist(rendered, settings.output)

    if rendered.alt:
        print(ALT_FRAMING, file=stream)
        print(rendered.alt, file=stream)
    if rendered.interactive:
        print(INTERACTIVE_FRAMING, file=stream)
        print(rendered.interactive, file=stream)
