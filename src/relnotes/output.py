"""Composition and writing of the final changelog document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .utils import default_eol, detect_eol, emit_output, log_debug, normalize_newlines

DEFAULT_PREAMBLE = """\
# Changelog

Notable changes to this project are documented in this file.

It is generated from the GitHub release notes of the project by relnotes.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html)."""

_VERSION_HEADING = re.compile(r"^## \[", re.MULTILINE)


@dataclass(frozen=True)
class ExistingDocument:
    """Content of a previously written output target."""

    content: str
    eol: Optional[str]

    @property
    def header(self) -> str:
        return extract_preserved_header(self.content)


def extract_preserved_header(content: str) -> str:
    """Return the text before the first version heading, without trailing whitespace."""
    match = _VERSION_HEADING.search(content)
    if match is not None:
        content = content[: match.start()]
    return content.rstrip()


def read_existing(path: Path) -> Optional[ExistingDocument]:
    """Read an output target without translating its line endings."""
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8", newline="") as handle:
        content = handle.read()
    if not content:
        return None
    return ExistingDocument(content=content, eol=detect_eol(content))


def compose_document(
    body: str,
    existing: Optional[ExistingDocument] = None,
    *,
    preamble: bool = True,
) -> str:
    """Combine the preserved header (or default preamble) with a rendered body.

    ``body`` uses ``\\n`` line endings; the result uses the line ending of the
    existing document, or the platform default.
    """
    if existing is not None:
        header = normalize_newlines(existing.header)
        eol = existing.eol or default_eol()
    else:
        header = DEFAULT_PREAMBLE if preamble else ""
        eol = default_eol()

    if header and body:
        document = f"{header}\n\n{body}"
    elif header:
        document = f"{header}\n"
    else:
        document = body
    if eol != "\n":
        document = document.replace("\n", eol)
    return document


def write_document(document: str, output: Optional[Path]) -> None:
    """Write the complete document to ``output`` or, without one, to stdout."""
    if output is None:
        emit_output(document, newline=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as handle:
        handle.write(document)
    log_debug(f"wrote {len(document)} characters to {output}")
