from __future__ import annotations

import pytest

from relnotes.utils import configure_logging


@pytest.fixture(autouse=True)
def _fresh_logging_and_eol(monkeypatch: pytest.MonkeyPatch) -> None:
    # Bind the logger to the current capture stream and pin the platform line ending.
    configure_logging()
    monkeypatch.setattr("relnotes.output.default_eol", lambda: "\n")
