"""
Rule Serializers

Encodes parsed rules as JSON, YAML or AWS Amplify custom rules.
"""

import json
from typing import Any, Dict, List, Sequence

import yaml

from redirects.models import Rule

OUTPUT_FORMATS = ("json", "yaml", "amplify")


def rules_to_dicts(rules: Sequence[Rule]) -> List[Dict[str, Any]]:
    """Convert rules to plain dictionaries, absent fields kept as None."""
    return [rule.to_dict() for rule in rules]


def rules_to_json(rules: Sequence[Rule], indent: int = 2) -> str:
    """
    Encode rules as a JSON array.

    Absent Params/Country/Language are written as null, never as
    an empty object or list.
    """
    return json.dumps(rules_to_dicts(rules), indent=indent or None)


def rules_to_yaml(rules: Sequence[Rule]) -> str:
    """Encode rules as a YAML list, keeping field order."""
    return yaml.dump(rules_to_dicts(rules), default_flow_style=False, sort_keys=False)


def rule_to_amplify(rule: Rule) -> Dict[str, Any]:
    """
    Convert a rule to an AWS Amplify custom rule.

    Amplify has no force flag or params, so only source, target, status
    and a single-country condition are carried over.
    """
    amplify_rule = {
        "source": rule.from_,
        "target": rule.to,
        "status": str(rule.status)
    }
    if rule.country is not None and len(rule.country) == 1:
        amplify_rule["condition"] = f"<{rule.country[0].upper()}>"
    return amplify_rule


def rules_to_amplify(rules: Sequence[Rule]) -> str:
    """Encode rules as compact Amplify JSON."""
    return json.dumps([rule_to_amplify(rule) for rule in rules])


def serialize_rules(rules: Sequence[Rule], output_format: str = "json", indent: int = 2) -> str:
    """
    Encode rules in the requested output format.

    Raises:
        ValueError: If the format is unknown
    """
    if output_format == "json":
        return rules_to_json(rules, indent=indent)
    if output_format == "yaml":
        return rules_to_yaml(rules)
    if output_format == "amplify":
        return rules_to_amplify(rules)
    raise ValueError(f"Invalid output format: {output_format}. Must be one of: {OUTPUT_FORMATS}")
