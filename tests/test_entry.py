"""Tests for entry editing commands."""

from __future__ import annotations

import pytest

from roxydoc.arguments import FunctionSignature
from roxydoc.config import RoxyConfig
from roxydoc.entry import (
    complete_tag,
    continue_line,
    fill_field,
    render_template,
    toggle_region,
    update_entry,
)
from roxydoc.errors import NoFunctionError, UnbalancedDelimiterError


SHORT_TEMPLATE = RoxyConfig(template=(("title", ""), ("param", "")))


class TestRenderTemplate:
    def test_default_template(self):
        lines = render_template(FunctionSignature("f", ["x", "y"]), RoxyConfig(author="Jane Doe"))
        assert lines == [
            "##' .. content for \\description{} (no empty lines) ..",
            "##'",
            "##' .. content for \\details{} ..",
            "##' @title",
            "##' @param x",
            "##' @param y",
            "##' @return",
            "##' @author Jane Doe",
            "##' @export",
        ]

    def test_custom_marker(self):
        config = RoxyConfig(marker="#'", template=(("param", ""),))
        assert render_template(FunctionSignature("f", ["a"]), config) == ["#' @param a"]


class TestUpdateEntry:
    def test_new_entry_above_function(self):
        lines = ["f <- function(x) x"]
        assert update_entry(lines, 0, SHORT_TEMPLATE) == ["##' @title", "##' @param x", "f <- function(x) x"]

    def test_new_entry_is_indented_like_definition(self):
        lines = ["  g <- function(k) k"]
        assert update_entry(lines, 0, SHORT_TEMPLATE) == ["  ##' @title", "  ##' @param k", "  g <- function(k) k"]

    def test_params_merged_in_place(self):
        lines = [
            "##' Title",
            "##' @param a first",
            "##' @param z stale",
            "##' @return value",
            "f <- function(a, b) NULL",
        ]
        assert update_entry(lines, 0, RoxyConfig()) == [
            "##' Title",
            "##' @param a first",
            "##' @param b",
            "##' @return value",
            "f <- function(a, b) NULL",
        ]

    def test_params_inserted_before_first_trailing_tag(self):
        lines = [
            "##' Title",
            "##'",
            "##' Details here.",
            "##' @return value",
            "f <- function(a) a",
        ]
        assert update_entry(lines, 2, RoxyConfig()) == [
            "##' Title",
            "##'",
            "##' Details here.",
            "##' @param a",
            "##' @return value",
            "f <- function(a) a",
        ]

    def test_params_appended_when_entry_has_no_tags(self):
        lines = ["##' Title", "f <- function(a) a"]
        assert update_entry(lines, 0, RoxyConfig()) == ["##' Title", "##' @param a", "f <- function(a) a"]

    def test_cursor_on_definition_updates_entry_above(self):
        lines = ["##' T", "##' @param a x", "", "f <- function(a, b) 1"]
        assert update_entry(lines, 3, RoxyConfig()) == [
            "##' T",
            "##' @param a x",
            "##' @param b",
            "",
            "f <- function(a, b) 1",
        ]

    def test_update_is_idempotent(self):
        lines = ["##' T", "##' @param b old", "f <- function(a, b) 1"]
        once = update_entry(lines, 0, RoxyConfig())
        assert update_entry(once, 0, RoxyConfig()) == once

    def test_current_entry_with_separated_params_unchanged(self):
        lines = [
            "##' T",
            "##' @param a x",
            "##'",
            "##' @param b y",
            "##' @return r",
            "f <- function(a, b) 1",
        ]
        assert update_entry(lines, 0, RoxyConfig()) == lines

    def test_separator_dropped_with_stale_param(self):
        lines = [
            "##' T",
            "##' @param a x",
            "##'",
            "##' @param z gone",
            "##'",
            "##' @param b y",
            "f <- function(a, b) 1",
        ]
        assert update_entry(lines, 0, RoxyConfig()) == [
            "##' T",
            "##' @param a x",
            "##'",
            "##' @param b y",
            "f <- function(a, b) 1",
        ]

    def test_input_not_modified(self):
        lines = ["##' T", "f <- function(a) 1"]
        update_entry(lines, 0, RoxyConfig())
        assert lines == ["##' T", "f <- function(a) 1"]

    def test_no_function(self):
        with pytest.raises(NoFunctionError):
            update_entry(["x <- 1"], 0, RoxyConfig())
        with pytest.raises(NoFunctionError):
            update_entry(["##' data doc", "NULL"], 0, RoxyConfig())

    def test_unbalanced_signature(self):
        with pytest.raises(UnbalancedDelimiterError):
            update_entry(["##' T", "f <- function(a, b"], 0, RoxyConfig())


class TestToggleRegion:
    def test_add_and_remove(self):
        lines = ["x <- 1", "", "y"]
        marked = toggle_region(lines, 0, 2)
        assert marked == ["##' x <- 1", "##'", "##' y"]
        assert toggle_region(marked, 0, 2) == lines

    def test_range_clamped(self):
        assert toggle_region(["a"], 0, 10) == ["##' a"]
        assert toggle_region(["a"], 3, 1) == ["a"]


class TestContinueLine:
    def test_marked_line_keeps_marker(self):
        assert continue_line(["##' some text"], 0, 8) == (["##' some", "##' text"], 1)

    def test_plain_line(self):
        assert continue_line(["abc"], 0, 1) == (["a", "bc"], 1)


def test_complete_tag():
    assert complete_tag("@par", RoxyConfig()) == ["param"]
    assert complete_tag("ex", RoxyConfig()) == [
        "example",
        "examples",
        "export",
        "exportClass",
        "exportMethod",
        "exportPattern",
    ]
    assert complete_tag("zzz", RoxyConfig()) == []


class TestFillField:
    def test_wraps_long_line(self):
        config = RoxyConfig(fill_column=20)
        lines = ["##' one two three four five six", "f <- 1"]
        assert fill_field(lines, 0, config) == ["##' one two three", "##' four five six", "f <- 1"]

    def test_joins_param_continuation(self):
        lines = ["##' @param x a", "##' b", "##' @return y"]
        assert fill_field(lines, 1, RoxyConfig()) == ["##' @param x a b", "##' @return y"]

    def test_param_not_filled_when_disabled(self):
        lines = ["##' @param x a", "##' b"]
        assert fill_field(lines, 0, RoxyConfig(fill_param=False)) == lines

    def test_examples_never_filled(self):
        lines = ["##' @examples", "##' f(1)", "##' f(2)"]
        assert fill_field(lines, 1, RoxyConfig()) == lines

    def test_outside_entry_unchanged(self):
        assert fill_field(["x <- 1"], 0, RoxyConfig()) == ["x <- 1"]
