import textwrap
from pathlib import Path

import pytest

from cleanlint.config import LintSettings
from cleanlint.loader import parse_source

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


@pytest.fixture
def make_unit():
    def _make(source: str, path: str = "sample.py"):
        return parse_source(textwrap.dedent(source).lstrip("\n"), path)

    return _make


@pytest.fixture
def settings():
    return LintSettings()


@pytest.fixture
def samples_dir():
    return SAMPLES_DIR
