from __future__ import annotations

import logging
from datetime import datetime, timezone

from relnotes.utils import (
    coerce_datetime,
    configure_logging,
    detect_eol,
    normalize_markdown,
    pluralize,
)


def test_detect_eol_reports_first_line_ending() -> None:
    assert detect_eol("a\r\nb\n") == "\r\n"
    assert detect_eol("a\nb\r\n") == "\n"
    assert detect_eol("a\rb") == "\r"
    assert detect_eol("no newline") is None


def test_coerce_datetime_accepts_github_timestamps() -> None:
    expected = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert coerce_datetime("2024-01-02T03:04:05Z") == expected
    assert coerce_datetime("2024-01-02") == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert coerce_datetime("") is None
    assert coerce_datetime(None) is None


def test_pluralize() -> None:
    assert pluralize(1, "release") == "1 release"
    assert pluralize(3, "release") == "3 releases"


def test_normalize_markdown_unwraps_paragraphs() -> None:
    assert normalize_markdown("A paragraph\nthat wraps.") == "A paragraph that wraps."
    assert normalize_markdown("* one\n* two") == "- one\n- two"
    assert normalize_markdown("  \n") == ""


def test_configure_logging_levels() -> None:
    assert configure_logging(quiet=True).level == logging.WARNING
    assert configure_logging(debug=True, quiet=True).level == logging.DEBUG
    assert configure_logging().level == logging.INFO
