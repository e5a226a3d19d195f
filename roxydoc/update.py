"""roxy-update

Refresh the ``@param`` fields of every Roxygen entry in a tree of R
sources so they match the function defined below each entry.

Modes:
  --dry-run   : compute changes and print a summary (no writes)
  --check     : like --dry-run but exits 1 if any changes would occur
  --write     : write changes to disk

Other:
  --add-missing : insert a template entry above undocumented top-level functions
  --strict      : exit 2 if any parameter list could not be parsed
  --verbose     : print per-function detail and full diffs

Example:
  roxy-update --root ./R --write

"""

from __future__ import annotations

import argparse
import difflib
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .arguments import FUNCTION_DEF_RE, find_function_signature
from .buffer import TextBuffer, read_text
from .config import RoxyConfig, load_config
from .entry import update_entry
from .errors import ConfigError, NoFunctionError, UnbalancedDelimiterError
from .scanner import entry_bounds, iter_entries


DEFAULT_EXCLUDE_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".Rproj.user",
    "renv",
    "packrat",
    "revdep",
    "node_modules",
    ".idea",
    ".vscode",
}


@dataclass
class FileChange:
    path: Path
    original: str
    updated: str
    updated_functions: List[str]
    errors: List[str] = field(default_factory=list)


def _write_text(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def iter_source_files(root: Path, ext_list: List[str], exclude_dirs: set[str]) -> Iterable[Path]:
    ext_set = {e if e.startswith(".") else f".{e}" for e in ext_list}

    for dirpath, dirnames, filenames in os.walk(root):
        # prune excluded dirs
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirs)

        for fn in sorted(filenames):
            p = Path(dirpath) / fn
            if p.suffix in ext_set:
                yield p


def _undocumented_functions(lines: Tuple[str, ...], marker: str) -> List[int]:
    """Line numbers of top-level function definitions with no entry above."""
    found: List[int] = []
    for i, line in enumerate(lines):
        if line[:1].isspace() or not FUNCTION_DEF_RE.match(line):
            continue
        above = i - 1
        while above >= 0 and not lines[above].strip():
            above -= 1
        if above >= 0 and entry_bounds(lines, above, marker) is not None:
            continue
        found.append(i)
    return found


def update_text(
    text: str,
    config: RoxyConfig,
    *,
    add_missing: bool = False,
    verbose: bool = False,
    path_for_logs: Optional[Path] = None,
) -> Tuple[str, List[str], List[str]]:
    """Update every documented function in ``text``.

    Returns (new_text, updated_function_names, error_messages).
    """
    buf = TextBuffer.from_text(text)
    marker = config.marker

    # Positions are collected first and edited from the end -> start so
    # earlier line numbers stay valid.
    targets: List[int] = [e.start for e in iter_entries(buf.lines, marker)]
    if add_missing:
        targets.extend(_undocumented_functions(buf.lines, marker))

    updated: List[str] = []
    errors: List[str] = []

    for pos in sorted(targets, reverse=True):
        entry = entry_bounds(buf.lines, pos, marker)
        try:
            start = entry.end + 1 if entry is not None else pos
            signature = find_function_signature(buf.lines, start)
            if signature is None:
                # Entries for data sets, packages, NULL etc.
                continue
            new_lines = update_entry(buf.lines, pos, config)
        except UnbalancedDelimiterError as e:
            errors.append(f"line {pos + 1}: {e}")
            continue
        except NoFunctionError:
            continue

        if tuple(new_lines) != buf.lines:
            if verbose and path_for_logs is not None:
                print(f"[roxy-update] {path_for_logs}: updating {signature.name}")
            buf = buf.with_lines(new_lines)
            updated.append(signature.name)

    return buf.to_text(), list(reversed(updated)), list(reversed(errors))


def unified_diff(a: str, b: str, fromfile: str, tofile: str) -> str:
    return "".join(
        difflib.unified_diff(
            a.splitlines(keepends=True),
            b.splitlines(keepends=True),
            fromfile=fromfile,
            tofile=tofile,
        )
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Refresh @param fields of Roxygen entries in R source files")

    p.add_argument("--root", required=True, help="Root directory of source tree to scan")
    p.add_argument(
        "--ext",
        default=".R,.r",
        help="Comma-separated list of file extensions to scan (default: .R,.r)",
    )
    p.add_argument(
        "--exclude-dirs",
        default=",".join(sorted(DEFAULT_EXCLUDE_DIRS)),
        help="Comma-separated directory names to skip while walking (default: VCS/renv/IDE dirs)",
    )
    p.add_argument("--config", help="YAML config file (marker, author, template, ...)")
    p.add_argument("--marker", help="Override the entry line marker (default: ##')")
    p.add_argument("--author", help="Override the author written into new templates")

    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--write", action="store_true", help="Write changes to files")
    mode.add_argument("--dry-run", action="store_true", help="Do not write changes (default if no mode is specified)")
    mode.add_argument("--check", action="store_true", help="No writes; exit 1 if any changes would be made")

    p.add_argument("--add-missing", action="store_true", help="Insert template entries above undocumented functions")
    p.add_argument("--strict", action="store_true", help="Exit 2 if any parameter list could not be parsed")
    p.add_argument("--verbose", action="store_true", help="Verbose logging (per-function updates; full diffs)")

    args = p.parse_args(argv)

    # Default behavior: dry-run if neither --write nor --check passed
    if not args.write and not args.check and not args.dry_run:
        args.dry_run = True

    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    root = Path(args.root).expanduser().resolve()
    ext_list = [e.strip() for e in str(args.ext).split(",") if e.strip()]
    exclude_dirs = {d.strip() for d in str(args.exclude_dirs).split(",") if d.strip()}

    if not root.exists() or not root.is_dir():
        print(f"ERROR: --root is not a directory: {root}", file=sys.stderr)
        return 2

    try:
        config = load_config(Path(args.config).expanduser() if args.config else None)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    config = config.override(marker=args.marker, author=args.author)

    changes: List[FileChange] = []
    errors_total: Dict[Path, List[str]] = {}

    for path in iter_source_files(root, ext_list, exclude_dirs):
        original = read_text(path)
        updated, functions, errors = update_text(
            original,
            config,
            add_missing=args.add_missing,
            verbose=args.verbose,
            path_for_logs=path,
        )

        if errors:
            errors_total[path] = errors

        if updated != original:
            changes.append(
                FileChange(
                    path=path,
                    original=original,
                    updated=updated,
                    updated_functions=functions,
                    errors=errors,
                )
            )

    if errors_total:
        msg_lines = ["[roxy-update] Could not parse function signatures:"]
        for path in sorted(errors_total):
            for err in errors_total[path]:
                msg_lines.append(f"  - {path}: {err}")
        print("\n".join(msg_lines), file=sys.stderr)

        if args.strict:
            return 2

    if not changes:
        if args.verbose:
            print("[roxy-update] no changes")
        return 0

    total = sum(len(c.updated_functions) for c in changes)
    print(f"[roxy-update] {len(changes)} file(s) would change; {total} entr(y/ies) updated")

    for c in changes:
        print(f"- {c.path}  ({len(c.updated_functions)} entr(y/ies))")
        if args.verbose:
            for name in c.updated_functions:
                print(f"    • {name}")
        if args.verbose or args.dry_run or args.check:
            d = unified_diff(
                c.original,
                c.updated,
                fromfile=str(c.path),
                tofile=str(c.path) + " (updated)",
            )
            if args.verbose:
                print(d)
            else:
                diff_lines = d.splitlines()
                if diff_lines:
                    print("\n".join(diff_lines[:200]))
                    if len(diff_lines) > 200:
                        print(f"... diff truncated ({len(diff_lines)} lines total). Use --verbose for full diff.")

    if args.check:
        return 1

    if args.write:
        for c in changes:
            _write_text(c.path, c.updated)
        print(f"[roxy-update] wrote {len(changes)} file(s)")
        return 0

    # dry-run (default)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
