"""Tests for TOML config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from lox.cli import EX_USAGE, build_parser, load_config, main, resolve_options
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text("[interpreter]\nmax_call_depth = 8\n")
        result = load_config(cfg, tmp_path)
        assert result["interpreter"] == {"max_call_depth": 8}

    def test_auto_discover_lox_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "lox.toml"
        cfg.write_text('[repl]\nprompt = "lox> "\n')
        result = load_config(None, tmp_path)
        assert result["repl"] == {"prompt": "lox> "}


class TestConfigMerge:
    def _options(self, tmp_path: Path, config: str | None, *extra: str):
        if config is not None:
            (tmp_path / "lox.toml").write_text(config)
        script = tmp_path / "prog.lox"
        script.write_text("")
        ns = build_parser().parse_args([str(script), *extra])
        return resolve_options(ns)

    def test_defaults(self, tmp_path: Path) -> None:
        opts = self._options(tmp_path, None)
        assert opts.max_call_depth == DEFAULT_MAX_CALL_DEPTH
        assert opts.prompt == "> "
        assert opts.debug is False
        assert opts.script == tmp_path / "prog.lox"

    def test_config_call_depth(self, tmp_path: Path) -> None:
        opts = self._options(tmp_path, "[interpreter]\nmax_call_depth = 200\n")
        assert opts.max_call_depth == 200

    def test_cli_overrides_config_call_depth(self, tmp_path: Path) -> None:
        opts = self._options(
            tmp_path, "[interpreter]\nmax_call_depth = 200\n", "--max-call-depth", "12"
        )
        assert opts.max_call_depth == 12

    def test_config_prompt(self, tmp_path: Path) -> None:
        opts = self._options(tmp_path, '[repl]\nprompt = ">>> "\n')
        assert opts.prompt == ">>> "

    def test_config_debug(self, tmp_path: Path) -> None:
        opts = self._options(tmp_path, "debug = true\n")
        assert opts.debug is True

    def test_cli_debug_wins_over_config(self, tmp_path: Path) -> None:
        opts = self._options(tmp_path, "debug = false\n", "--debug")
        assert opts.debug is True

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        other = tmp_path / "other.toml"
        other.write_text("[interpreter]\nmax_call_depth = 3\n")
        opts = self._options(tmp_path, None, "--config", str(other))
        assert opts.max_call_depth == 3

    @pytest.mark.parametrize("value", ["0", "-1", "20001", "true", '"deep"'])
    def test_invalid_call_depth_rejected(self, tmp_path: Path, value: str) -> None:
        import argparse

        with pytest.raises(argparse.ArgumentTypeError):
            self._options(tmp_path, f"[interpreter]\nmax_call_depth = {value}\n")


class TestConfigExitCodes:
    def test_malformed_toml(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (tmp_path / "lox.toml").write_text("[interpreter\n")
        script = tmp_path / "prog.lox"
        script.write_text("print 1;")
        assert main([str(script)]) == EX_USAGE
        assert capsys.readouterr().err.startswith("error:")

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "lox.toml").write_text("[interpreter]\nmax_call_depth = 0\n")
        script = tmp_path / "prog.lox"
        script.write_text("print 1;")
        assert main([str(script)]) == EX_USAGE

    def test_config_limit_used_at_runtime(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "lox.toml").write_text("[interpreter]\nmax_call_depth = 2\n")
        script = tmp_path / "prog.lox"
        script.write_text("fun a() { b(); }\nfun b() { c(); }\nfun c() {}\na();\n")
        assert main([str(script)]) == 65
        assert "call depth limit (2) exceeded" in capsys.readouterr().err
