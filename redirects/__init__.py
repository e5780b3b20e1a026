"""
Redirects Package

Netlify-style _redirects file parsing.
"""

from .models import Rule, Params, ValidationResult, params_has, params_get
from .parser import RuleParser, parse, parse_string, parse_file, must
from .serializers import rules_to_json, rules_to_yaml, rules_to_amplify, serialize_rules
from .validator import RuleSetValidator

__all__ = [
    "Rule",
    "Params",
    "ValidationResult",
    "params_has",
    "params_get",
    "RuleParser",
    "parse",
    "parse_string",
    "parse_file",
    "must",
    "rules_to_json",
    "rules_to_yaml",
    "rules_to_amplify",
    "serialize_rules",
    "RuleSetValidator"
]
