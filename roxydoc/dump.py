"""
Diagnostic listing of the Roxygen entries in an R source file: their
fields, the function each one documents and the merged parameter list.
"""
from __future__ import annotations

from pathlib import Path
import argparse
import sys
from typing import Any

import yaml

from .arguments import find_function_signature, merge_args, parse_param_fields
from .buffer import TextBuffer, read_text
from .config import RoxyConfig, load_config
from .errors import ConfigError, UnbalancedDelimiterError
from .scanner import LineRange, iter_entries, iter_fields


# ========================================
# YAML utilities
# ========================================

class LiteralStr(str):
    """Marker type for YAML literal block scalars."""


class LiteralDumper(yaml.SafeDumper):
    pass


def _literal_str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")


LiteralDumper.add_representer(LiteralStr, _literal_str_representer)


def as_yaml_str(s: str) -> str:
    """Use literal block scalar for multiline strings to keep YAML readable."""
    return LiteralStr(s) if "\n" in s else s


# ========================================
# Entry summaries
# ========================================

def describe_entry(lines: list[str], entry: LineRange, config: RoxyConfig) -> dict[str, Any]:
    """Summarize one entry as plain data (used for both output formats)."""
    marker = config.marker
    fields = [
        {"tag": f.tag, "lines": [f.bounds.start + 1, f.bounds.end + 1], "text": as_yaml_str(f.body)}
        for f in iter_fields(lines, entry, marker)
    ]
    payload: dict[str, Any] = {
        "lines": [entry.start + 1, entry.end + 1],
        "fields": fields,
    }

    try:
        signature = find_function_signature(lines, entry.end + 1)
    except UnbalancedDelimiterError as e:
        payload["error"] = str(e)
        return payload
    if signature is None:
        return payload

    documented = parse_param_fields(lines, entry, marker)
    merged = merge_args(signature.args, documented)
    current = {p.name for p in merged}
    documented_names = {p.name for p in documented}

    payload["function"] = signature.name
    payload["signature"] = signature.header
    payload["params"] = {p.name: as_yaml_str(p.description) for p in merged}
    payload["undocumented"] = [p.name for p in merged if p.name not in documented_names]
    payload["stale"] = [p.name for p in documented if p.name not in current]
    return payload


def dump_file(path: Path, config: RoxyConfig, max_entries: int) -> None:
    lines = list(TextBuffer.from_text(read_text(path)).lines)
    entries = list(iter_entries(lines, config.marker))
    print(f"{path}: {len(entries)} entries\n")

    for i, entry in enumerate(entries[:max_entries], start=1):
        info = describe_entry(lines, entry, config)
        start, end = info["lines"]
        print(f"----- ENTRY {i} (lines {start}-{end}) -----")
        for f in info["fields"]:
            first = str(f["text"]).splitlines()[0] if f["text"] else ""
            tag = f"@{f['tag']}" if f["tag"] else "(text)"
            print(f"  {tag:<12} {first}")
        if "error" in info:
            print(f"error: {info['error']}")
        if "function" in info:
            print(f"function: {info['signature']}")
            for name, desc in info["params"].items():
                mark = "  (undocumented)" if name in info["undocumented"] else ""
                first = str(desc).splitlines()[0] if desc else ""
                print(f"  - {name}: {first}{mark}")
            if info["stale"]:
                print(f"stale: {info['stale']}")
        print()


def dump_yaml(path: Path, config: RoxyConfig, max_entries: int) -> None:
    lines = list(TextBuffer.from_text(read_text(path)).lines)
    entries = list(iter_entries(lines, config.marker))
    payload = {
        "source_file": str(path),
        "entries": [describe_entry(lines, e, config) for e in entries[:max_entries]],
    }
    print(
        yaml.dump(
            payload,
            Dumper=LiteralDumper,
            sort_keys=False,
            allow_unicode=True,
            width=1000,
        ),
        end="",
    )


# ========================================
# Main entry point
# ========================================

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="List the Roxygen entries of an R source file")
    parser.add_argument("file", help="R source file to inspect")
    parser.add_argument(
        "--max-entries",
        type=int,
        default=50,
        help="Max number of entries to dump (default: 50)",
    )
    parser.add_argument("--yaml", action="store_true", help="Print the listing as a YAML document")
    parser.add_argument("--config", help="YAML config file (marker, author, template, ...)")
    parser.add_argument("--marker", help="Override the entry line marker (default: ##')")
    args = parser.parse_args(argv)

    path = Path(args.file)
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"[roxy-dump] {e}", file=sys.stderr)
        return 2
    config = config.override(marker=args.marker)

    if args.yaml:
        dump_yaml(path, config, max_entries=args.max_entries)
    else:
        dump_file(path, config, max_entries=args.max_entries)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
