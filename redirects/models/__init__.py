"""
Redirects Models Package

Exports all model classes for parsed _redirects rules.
"""

from .rule import (
    Rule,
    Params,
    ParamValue,
    ValidationResult,
    params_has,
    params_get,
    DEFAULT_STATUS,
    REWRITE_STATUS
)

__all__ = [
    "Rule",
    "Params",
    "ParamValue",
    "ValidationResult",
    "params_has",
    "params_get",
    "DEFAULT_STATUS",
    "REWRITE_STATUS"
]
