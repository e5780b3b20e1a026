"""
Redirects Parser Package

Exports the parser class and module-level parse helpers.
"""

from .rule_parser import (
    RuleParser,
    Phase,
    RULE_FORMAT,
    parse,
    parse_string,
    parse_file,
    must
)

__all__ = [
    "RuleParser",
    "Phase",
    "RULE_FORMAT",
    "parse",
    "parse_string",
    "parse_file",
    "must"
]
