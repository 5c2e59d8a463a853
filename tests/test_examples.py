"""Integration test: run every example .lox program and compare its output."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from lox.cli import main
from lox.session import Session

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


def _find_lox_files() -> list[Path]:
    """Find all .lox files in the examples directory."""
    return sorted(EXAMPLES_DIR.rglob("*.lox"))


@pytest.fixture(params=_find_lox_files(), ids=lambda p: str(p.relative_to(EXAMPLES_DIR)))
def lox_file(request: pytest.FixtureRequest) -> Path:
    return request.param


class TestExampleFiles:
    def test_has_expected_output(self, lox_file: Path):
        assert lox_file.with_suffix(".out").is_file()

    def test_output_matches(self, lox_file: Path):
        source = lox_file.read_text(encoding="utf-8")
        out = io.StringIO()
        Session(out=out).run(source)
        expected = lox_file.with_suffix(".out").read_text(encoding="utf-8")
        assert out.getvalue() == expected

    def test_cli_exit_code(self, lox_file: Path, capsys: pytest.CaptureFixture[str]):
        assert main([str(lox_file)]) == 0
        assert capsys.readouterr().err == ""
