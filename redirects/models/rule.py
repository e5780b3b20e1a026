"""
Rule Models

Defines data models for parsed _redirects rules.
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_STATUS = 301
REWRITE_STATUS = 200

ParamValue = Union[bool, str]

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_PORT = re.compile(r"[0-9]*")


class Params(dict):
    """
    Arbitrary key/value pairs attached to a rule.

    A value is either the string after `=` or True for a bare key.
    Params are read-only once built.
    """

    def has(self, key: str) -> bool:
        """Return True if the param is present."""
        return key in self

    def _read_only(self, *args, **kwargs):
        raise TypeError("Params are read-only")

    __setitem__ = _read_only
    __delitem__ = _read_only
    __ior__ = _read_only
    update = _read_only
    pop = _read_only
    popitem = _read_only
    clear = _read_only
    setdefault = _read_only

    def __reduce__(self):
        return (Params, (dict(self),))


def params_has(params: Optional[Params], key: str) -> bool:
    """Nil-safe presence check on a possibly absent params map."""
    if params is None:
        return False
    return key in params


def params_get(params: Optional[Params], key: str) -> Optional[ParamValue]:
    """Nil-safe lookup on a possibly absent params map."""
    if params is None:
        return None
    return params.get(key)


class Rule(BaseModel):
    """
    A single redirection, rewrite or proxy rule.

    Example:
        /israel/*  splat=:splat  /israel/he/:splat  302!  Country=au,nz  Language=he
    """
    model_config = ConfigDict(frozen=True)

    from_: str = Field(..., description="Path which is matched to perform the rule")
    to: str = Field(..., description="Destination path, or absolute URL to proxy to")
    status: int = Field(
        default=DEFAULT_STATUS,
        description="3xx redirect, 200 rewrite, any other code is served as-is"
    )
    force: bool = Field(default=False, description="Apply even when a static file exists at `from`")
    params: Optional[Dict[str, ParamValue]] = Field(None, description="Parameters given between `from` and `to`")
    country: Optional[Tuple[str, ...]] = Field(None, description="ISO 3166-1 alpha-2 country codes")
    language: Optional[Tuple[str, ...]] = Field(None, description="ISO 639-1 language codes")

    @field_validator('params', mode='after')
    @classmethod
    def validate_params(cls, v: Optional[Dict[str, ParamValue]]) -> Optional[Params]:
        """Re-wrap validated params so `has`/`get` are available."""
        if v is None:
            return None
        return Params(v)

    def is_rewrite(self) -> bool:
        """Return True if the rule represents a rewrite (status 200)."""
        return self.status == REWRITE_STATUS

    def is_proxy(self) -> bool:
        """Return True if it's a proxy rule (the destination is a valid URL with a host)."""
        try:
            parts = urlsplit(self.to)
        except ValueError:
            return False
        authority = parts.netloc.rpartition("@")[2]
        # Any run of ASCII digits is a valid port, whatever its value
        colon = authority.rfind(":", authority.rfind("]") + 1)
        if colon != -1 and _PORT.fullmatch(authority[colon + 1:]) is None:
            return False
        if _BAD_ESCAPE.search(self.to):
            return False
        return bool(authority)

    def has_param(self, key: str) -> bool:
        return params_has(self.params, key)

    def get_param(self, key: str) -> Optional[ParamValue]:
        return params_get(self.params, key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, keeping absent optional fields as None."""
        return {
            "From": self.from_,
            "To": self.to,
            "Status": self.status,
            "Force": self.force,
            "Params": dict(self.params) if self.params is not None else None,
            "Country": list(self.country) if self.country is not None else None,
            "Language": list(self.language) if self.language is not None else None
        }


class ValidationResult(BaseModel):
    """
    Result of validating a rule set.
    """
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
