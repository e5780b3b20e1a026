#!/usr/bin/env python3
"""
Redirects CLI
Command line interface for parsing and checking _redirects files.
"""
import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from config import RedirectsConfig, load_config
from exceptions import RedirectsError
from redirects.logging_setup import setup_logging
from redirects.parser import RuleParser
from redirects.serializers import OUTPUT_FORMATS, serialize_rules
from redirects.validator import RuleSetValidator


console = Console()
error_console = Console(stderr=True)
logger = logging.getLogger("RedirectsCLI")


def _load_rules(config: RedirectsConfig, path: Optional[str]):
    redirects_path = path or config.parser.redirects_path
    try:
        return RuleParser().parse_file(redirects_path, encoding=config.parser.encoding)
    except RedirectsError as e:
        logger.debug(f"Parse failed: {e.to_dict()}")
        error_console.print(Panel.fit(f"Error: {escape(str(e))}", title=redirects_path, border_style="red"))
        sys.exit(1)


def run_parse(config: RedirectsConfig, path: Optional[str], output_format: Optional[str], indent: Optional[int]):
    """Parse a redirects file and print the serialized rules."""
    rules = _load_rules(config, path)
    output = serialize_rules(
        rules,
        output_format=output_format or config.output.format,
        indent=config.output.indent if indent is None else indent
    )
    print(output)


def run_validate(config: RedirectsConfig, path: Optional[str]):
    """Parse a redirects file and report lint findings."""
    rules = _load_rules(config, path)
    result = RuleSetValidator().validate(rules)

    for error in result.errors:
        console.print(f"[red]error[/red] {escape(error)}", highlight=False)
    for warning in result.warnings:
        console.print(f"[yellow]warning[/yellow] {escape(warning)}", highlight=False)

    if not result.valid:
        console.print(
            Panel.fit(
                f"{len(rules)} rules, {len(result.errors)} errors, {len(result.warnings)} warnings",
                title="Invalid",
                border_style="red",
            )
        )
        sys.exit(1)

    console.print(
        Panel.fit(
            f"{len(rules)} rules, {len(result.warnings)} warnings",
            title="OK",
            border_style="green",
        )
    )


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Redirects CLI")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    parse_parser = subparsers.add_parser("parse", help="Parse a _redirects file and print its rules")
    parse_parser.add_argument("path", nargs="?", help="Redirects file (defaults to the configured path)")
    parse_parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format")
    parse_parser.add_argument("--indent", type=int, help="JSON indentation")

    validate_parser = subparsers.add_parser("validate", help="Check a _redirects file for likely mistakes")
    validate_parser.add_argument("path", nargs="?", help="Redirects file (defaults to the configured path)")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except RedirectsError as e:
        error_console.print(Panel.fit(f"Configuration error: {e}", border_style="red"))
        sys.exit(1)

    setup_logging(config.system.log_level)

    if args.command == "parse":
        run_parse(config, args.path, args.format, args.indent)
    elif args.command == "validate":
        run_validate(config, args.path)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
