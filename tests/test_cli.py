"""Tests for the command-line interface."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from use_cdn import __version__
from use_cdn.__main__ import main
from use_cdn.cli.app import app
from use_cdn.exceptions import CacheMissError, ConfigurationError
from use_cdn.storage.cache import WritableCache

CONFIG = """\
config = [
    {"package": "jquery", "version": "latest", "files": ["dist/jquery.js"]},
]
"""


def write_config(tmp_path: Path, text: str = CONFIG) -> Path:
    path = tmp_path / "use_cdn_conf.py"
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "resolve" in result.output
    assert "files" in result.output


def test_cli_version() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


async def test_cli_files(tmp_path: Path, cache: WritableCache, cache_root) -> None:
    stored = await cache.set("jquery", "3.4.1", "dist/jquery.js", "jquery")
    await cache.link("jquery", "3.4.1", "latest")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["files", "-c", str(write_config(tmp_path)), "--cache-dir", str(cache_root)],
    )

    assert result.exit_code == 0
    assert result.output.splitlines() == [str(stored)]


async def test_cli_files_unresolved(tmp_path: Path, cache, cache_root) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["files", "-c", str(write_config(tmp_path)), "--cache-dir", str(cache_root)],
    )

    assert result.exit_code == 1
    assert isinstance(result.exception, CacheMissError)


def test_cli_files_applies_overrides(tmp_path: Path, cache_root, monkeypatch) -> None:
    stored = cache_root / "cache" / "jquery" / "2.2.4" / "dist" / "jquery.js"
    stored.parent.mkdir(parents=True)
    stored.write_text("jquery")
    (cache_root / "meta").write_text('{"version": 1}')
    monkeypatch.setenv("USE_CDN_OVERRIDES", "jquery@2.2.4")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["files", "-c", str(write_config(tmp_path)), "--cache-dir", str(cache_root)],
    )

    assert result.exit_code == 0
    assert result.output.splitlines() == [str(stored.resolve())]


def test_cli_resolve_empty_config(tmp_path: Path) -> None:
    runner = CliRunner()
    config = write_config(tmp_path, "config = []\n")
    cache_dir = tmp_path / ".use-cdn"

    result = runner.invoke(
        app, ["resolve", "-c", str(config), "--cache-dir", str(cache_dir)]
    )

    assert result.exit_code == 0
    assert "Resolved 0 file(s)" in result.output
    assert (cache_dir / "meta").is_file()


def test_cli_missing_config(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["resolve", "-c", str(tmp_path / "missing.py")])

    assert result.exit_code == 1
    assert isinstance(result.exception, ConfigurationError)


async def test_main_files_unresolved_hint(
    tmp_path: Path, cache, cache_root, monkeypatch, capsys
) -> None:
    config = write_config(tmp_path)
    monkeypatch.setattr(
        sys,
        "argv",
        ["use-cdn", "files", "-c", str(config), "--cache-dir", str(cache_root)],
    )

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "jquery@latest has not been resolved" in captured.err
    assert "run `use-cdn resolve` first" in captured.err
