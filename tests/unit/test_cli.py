"""Unit tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from docs_site_search import cli
from docs_site_search.search.storage import INDEX_FILENAME


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    """Leave pytest's log capture handlers in place."""
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def test_build_writes_index(site_dir: Path, tmp_path: Path, capsys) -> None:
    out_dir = tmp_path / "dist"

    exit_code = cli.main(["build", str(site_dir), "--out-dir", str(out_dir)])

    assert exit_code == 0
    assert (out_dir / INDEX_FILENAME).is_file()
    assert "Indexed 3 pages" in capsys.readouterr().out


def test_build_defaults_to_site_dir(site_dir: Path) -> None:
    assert cli.main(["build", str(site_dir)]) == 0
    assert (site_dir / INDEX_FILENAME).is_file()


def test_build_missing_site_dir_fails(tmp_path: Path) -> None:
    assert cli.main(["build", str(tmp_path / "missing")]) == 1


def test_build_skips_index_when_search_disabled(site_dir: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("DOCS_SEARCH_SEARCH_ENABLED", "false")

    assert cli.main(["build", str(site_dir)]) == 0
    assert not (site_dir / INDEX_FILENAME).exists()
    assert "Search disabled" in capsys.readouterr().out


def test_search_prints_results(site_dir: Path, capsys) -> None:
    cli.main(["build", str(site_dir)])
    capsys.readouterr()

    exit_code = cli.main(["search", str(site_dir), "installation"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("1. Installation (/guide/install.html)")


def test_search_json_output(site_dir: Path, capsys) -> None:
    cli.main(["build", str(site_dir)])
    capsys.readouterr()

    exit_code = cli.main(["search", str(site_dir / INDEX_FILENAME), "instal", "--json", "--limit", "1"])

    results = orjson.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert len(results) == 1
    assert results[0]["id"] == "guide/install"


def test_search_without_prefix(site_dir: Path, capsys) -> None:
    cli.main(["build", str(site_dir)])
    capsys.readouterr()

    cli.main(["search", str(site_dir), "instal", "--no-prefix"])

    assert "No results." in capsys.readouterr().out


def test_search_missing_index_fails(tmp_path: Path) -> None:
    assert cli.main(["search", str(tmp_path), "anything"]) == 1


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_serve_runs_uvicorn(site_dir: Path, monkeypatch) -> None:
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr("uvicorn.run", fake_run)

    exit_code = cli.main(["serve", str(site_dir), "--port", "9001", "--base", "/docs/"])

    assert exit_code == 0
    assert calls["port"] == 9001
    assert calls["host"] == "127.0.0.1"
    assert calls["app"] is not None
