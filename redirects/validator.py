"""
Rule Set Validator

Lints a parsed rule set for rules that parse fine but will not behave
as the author probably expects.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

from redirects.models import Rule, ValidationResult

logger = logging.getLogger(__name__)

# Codes static hosts act on; anything else is served with that status as-is.
KNOWN_STATUSES = {200, 301, 302, 303, 307, 308, 404, 410, 451}

_RestrictionKey = Tuple[str, Optional[Tuple[str, ...]], Optional[Tuple[str, ...]]]


def _restriction_key(rule: Rule) -> _RestrictionKey:
    country = tuple(rule.country) if rule.country is not None else None
    language = tuple(rule.language) if rule.language is not None else None
    return rule.from_, country, language


class RuleSetValidator:
    """
    Validate rules after parsing.

    Errors make the rule set invalid; warnings are advisory.
    """

    def __init__(self, known_statuses: Optional[set] = None):
        self.known_statuses = known_statuses if known_statuses is not None else set(KNOWN_STATUSES)

    def validate(self, rules: Sequence[Rule]) -> ValidationResult:
        """
        Validate a rule set.

        Args:
            rules: Rules in the order they were parsed

        Returns:
            ValidationResult with any errors/warnings
        """
        errors = []
        warnings = []
        first_seen: Dict[_RestrictionKey, int] = {}

        for index, rule in enumerate(rules, 1):
            label = f"rule {index} ({rule.from_} -> {rule.to})"

            if not 100 <= rule.status <= 599:
                errors.append(f"{label}: status {rule.status} is not a valid HTTP status code")
            elif rule.status not in self.known_statuses:
                warnings.append(f"{label}: status {rule.status} is not a redirect, rewrite or known error code")

            if rule.from_ == rule.to:
                warnings.append(f"{label}: destination is the same as the source path")

            key = _restriction_key(rule)
            if key in first_seen:
                warnings.append(
                    f"{label}: shadowed by rule {first_seen[key]} with the same source and conditions"
                )
            else:
                first_seen[key] = index

        if errors or warnings:
            logger.debug(f"Validated {len(rules)} rules: {len(errors)} errors, {len(warnings)} warnings")

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )
