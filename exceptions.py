"""
Custom Exception Hierarchy for the _redirects parser
Provides structured error handling with context preservation.
"""
from typing import Optional, Dict, Any


class RedirectsError(Exception):
    """Base exception for all redirects errors."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        line_number: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.component = component
        self.line_number = line_number
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "line_number": self.line_number,
            "context": self.context
        }


# -------------------------------------------------------------------------
# CONFIGURATION ERRORS
# -------------------------------------------------------------------------

class ConfigurationError(RedirectsError):
    """Raised when configuration is invalid or missing."""
    pass


# -------------------------------------------------------------------------
# INPUT ERRORS
# -------------------------------------------------------------------------

class RedirectsFileError(RedirectsError):
    """Raised when a redirects file cannot be found or read."""
    pass


# -------------------------------------------------------------------------
# PARSE ERRORS
# -------------------------------------------------------------------------

class RuleParseError(RedirectsError):
    """
    Base class for failures while parsing a redirects line.

    The offending line text, its 1-based number and the token that
    failed (when there is one) are kept on the exception and in context.
    """

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
        token: Optional[str] = None,
        component: Optional[str] = "RuleParser"
    ):
        self.line = line
        self.token = token
        super().__init__(
            message,
            component=component,
            line_number=line_number,
            context={"line": line, "token": token}
        )

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        return self.message


class MissingDestinationError(RuleParseError):
    """Raised when a line has no `to` field."""
    pass


class RuleFormatError(RuleParseError):
    """Raised when a token does not fit the redirects grammar."""
    pass


class UnknownOptionError(RuleFormatError):
    """Raised when an option key is neither Country nor Language."""
    pass
