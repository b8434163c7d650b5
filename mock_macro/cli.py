"""CLI for the mock macro transform.

Usage:
    python -m mock_macro.cli transform tests/foo.spec.ts --registry registry.yaml -o out.ts --map
    python -m mock_macro.cli check tests/ --registry registry.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mock_macro.config import ConfigError, load_config
from mock_macro.diagnostics import CollectingReporter
from mock_macro.registry import BindingRegistry, RegistryLoadError
from mock_macro.scanner import scan_directory
from mock_macro.transform import MockTransformPlugin


def _build_plugin(args: argparse.Namespace) -> MockTransformPlugin:
    try:
        config = load_config(args.config)
        registry = BindingRegistry.from_file(args.registry, config)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(2)
    except (ConfigError, RegistryLoadError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    return MockTransformPlugin(registry, config, CollectingReporter())


def cmd_transform(args: argparse.Namespace) -> None:
    """Rewrite a single module."""
    src = Path(args.file)
    if not src.exists():
        print(f"ERROR: file not found: {src}", file=sys.stderr)
        sys.exit(2)

    plugin = _build_plugin(args)
    code = src.read_text(encoding="utf-8")
    result = plugin.transform(code, src.as_posix())

    for diagnostic in plugin.diagnostics:
        print(f"ERROR: {diagnostic}", file=sys.stderr)

    out_code = result.code if result is not None else code
    if args.output:
        out = Path(args.output)
        out.write_text(out_code, encoding="utf-8")
        if args.map and result is not None:
            map_path = out.with_name(out.name + ".map")
            map_path.write_text(result.map.to_json(), encoding="utf-8")
            print(f"Wrote {out} and {map_path}")
        else:
            print(f"Wrote {out}")
    else:
        sys.stdout.write(out_code)
        if args.map and result is not None:
            print(result.map.to_json())

    if plugin.diagnostics:
        sys.exit(1)


def cmd_check(args: argparse.Namespace) -> None:
    """Validate every candidate module under a directory."""
    root = Path(args.directory)
    if not root.is_dir():
        print(f"ERROR: directory not found: {root}", file=sys.stderr)
        sys.exit(2)

    plugin = _build_plugin(args)
    files = scan_directory(root, plugin.config)
    rewritten = 0
    for path in files:
        if plugin.transform(path.read_text(encoding="utf-8"), path.as_posix()) is not None:
            rewritten += 1

    for diagnostic in plugin.diagnostics:
        print(diagnostic)
    print(f"Checked {len(files)} modules: {rewritten} rewritten, "
          f"{len(plugin.diagnostics)} errors")

    if plugin.diagnostics:
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mock-macro",
        description="Rewrite mockNuxtImport() / mockComponent() macros into vi.mock() calls",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # transform
    p_transform = sub.add_parser("transform", help="Rewrite a single module")
    p_transform.add_argument("file", help="Module to transform")
    p_transform.add_argument("-r", "--registry", required=True, help="Registry YAML/JSON file")
    p_transform.add_argument("-c", "--config", help="Config YAML file")
    p_transform.add_argument("-o", "--output", help="Output path (stdout if omitted)")
    p_transform.add_argument("--map", action="store_true", help="Also emit the source map")
    p_transform.set_defaults(func=cmd_transform)

    # check
    p_check = sub.add_parser("check", help="Report macro errors under a directory")
    p_check.add_argument("directory", help="Directory to scan")
    p_check.add_argument("-r", "--registry", required=True, help="Registry YAML/JSON file")
    p_check.add_argument("-c", "--config", help="Config YAML file")
    p_check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
