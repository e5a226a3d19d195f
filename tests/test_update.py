"""Tests for the roxy-update command."""

from __future__ import annotations

from pathlib import Path

import pytest

from roxydoc.config import RoxyConfig
from roxydoc.update import iter_source_files, main, update_text


SOURCE = """\
##' Add numbers.
##' @param a first
##' @param old gone
##' @return the sum
add <- function(a, b = 1) {
  a + b
}

##' Package data.
NULL

helper <- function(x) x
"""

EXPECTED = """\
##' Add numbers.
##' @param a first
##' @param b
##' @return the sum
add <- function(a, b = 1) {
  a + b
}

##' Package data.
NULL

helper <- function(x) x
"""


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    (tmp_path / "R").mkdir()
    (tmp_path / "R" / "add.R").write_text(SOURCE, encoding="utf-8")
    (tmp_path / "renv").mkdir()
    (tmp_path / "renv" / "vendored.R").write_text(SOURCE, encoding="utf-8")
    (tmp_path / "notes.txt").write_text(SOURCE, encoding="utf-8")
    return tmp_path


class TestUpdateText:
    def test_updates_documented_functions_only(self):
        text, functions, errors = update_text(SOURCE, RoxyConfig())
        assert text == EXPECTED
        assert functions == ["add"]
        assert errors == []

    def test_add_missing(self):
        config = RoxyConfig(template=(("title", ""), ("param", "")))
        text, functions, _ = update_text(SOURCE, config, add_missing=True)
        assert "##' @title\n##' @param x\nhelper <- function(x) x\n" in text
        assert functions == ["add", "helper"]

    def test_unbalanced_reported(self):
        text, functions, errors = update_text("##' T\nf <- function(a, b\n", RoxyConfig())
        assert text == "##' T\nf <- function(a, b\n"
        assert functions == []
        assert len(errors) == 1
        assert errors[0].startswith("line 1:")

    def test_unchanged_text(self):
        text, functions, errors = update_text(EXPECTED, RoxyConfig())
        assert text == EXPECTED
        assert functions == []


def test_iter_source_files_prunes_excluded(tree: Path):
    found = list(iter_source_files(tree, [".R"], {"renv"}))
    assert found == [tree / "R" / "add.R"]


def test_dry_run_does_not_write(tree: Path, capsys):
    assert main(["--root", str(tree)]) == 0
    out = capsys.readouterr().out
    assert "[roxy-update] 1 file(s) would change" in out
    assert "+##' @param b" in out
    assert (tree / "R" / "add.R").read_text(encoding="utf-8") == SOURCE


def test_check_exits_one(tree: Path):
    assert main(["--root", str(tree), "--check"]) == 1


def test_write(tree: Path, capsys):
    assert main(["--root", str(tree), "--write"]) == 0
    assert (tree / "R" / "add.R").read_text(encoding="utf-8") == EXPECTED
    assert (tree / "renv" / "vendored.R").read_text(encoding="utf-8") == SOURCE
    assert "[roxy-update] wrote 1 file(s)" in capsys.readouterr().out
    assert main(["--root", str(tree), "--check"]) == 0


def test_strict_unbalanced(tmp_path: Path, capsys):
    (tmp_path / "bad.R").write_text("##' T\nf <- function(a, b\n", encoding="utf-8")
    assert main(["--root", str(tmp_path)]) == 0
    assert "Could not parse function signatures" in capsys.readouterr().err
    assert main(["--root", str(tmp_path), "--strict"]) == 2


def test_marker_override(tmp_path: Path):
    (tmp_path / "f.R").write_text("#' T\nf <- function(a) a\n", encoding="utf-8")
    assert main(["--root", str(tmp_path), "--marker", "#'", "--write"]) == 0
    assert (tmp_path / "f.R").read_text(encoding="utf-8") == "#' T\n#' @param a\nf <- function(a) a\n"


def test_bad_root_and_config(tmp_path: Path, capsys):
    assert main(["--root", str(tmp_path / "missing")]) == 2
    assert main(["--root", str(tmp_path), "--config", str(tmp_path / "nope.yaml")]) == 2
    assert "ERROR" in capsys.readouterr().err


PAGE_BREAK = "##' T\n##' @param a x\nf <- function(a) a\n\x0c\ng <- 1\n"


def test_page_break_survives_update_text():
    text, functions, errors = update_text(PAGE_BREAK, RoxyConfig())
    assert text == PAGE_BREAK
    assert functions == []


def test_page_break_file_needs_no_change(tmp_path: Path, capsys):
    path = tmp_path / "f.R"
    path.write_text(PAGE_BREAK, encoding="utf-8")
    assert main(["--root", str(tmp_path), "--check"]) == 0
    assert main(["--root", str(tmp_path), "--write"]) == 0
    assert "wrote" not in capsys.readouterr().out
    assert path.read_text(encoding="utf-8") == PAGE_BREAK


def test_separated_params_need_no_change(tmp_path: Path):
    (tmp_path / "f.R").write_text(
        "##' T\n##' @param a x\n##'\n##' @param b y\n##' @return r\nf <- function(a, b) 1\n",
        encoding="utf-8",
    )
    assert main(["--root", str(tmp_path), "--check"]) == 0
