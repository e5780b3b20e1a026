"""
Rule Parser

Parses Netlify-style _redirects files into Rule models.

Each non-blank, non-comment line has the shape:

    from [k=v ...] to [status][!] [Country=x,y,z] [Language=x,y,z]

Tokens are classified by position. A line is read by walking its tokens
through the phases FROM -> PARAMS -> TO -> STATUS -> OPTIONS; a phase that
cannot use the current token hands it to the next phase.
"""

import io
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from exceptions import (
    RedirectsError,
    RedirectsFileError,
    MissingDestinationError,
    RuleFormatError,
    UnknownOptionError
)
from redirects.models import Rule, ParamValue, DEFAULT_STATUS

logger = logging.getLogger(__name__)

RULE_FORMAT = "`from [k=v ...] to [status][!] [Country=x,y,z] [Language=x,y,z]`"

PATH_PREFIXES = ("/", "http://", "https://")
COUNTRY_OPTION = "Country"
LANGUAGE_OPTION = "Language"

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -2 ** 63
_INT64_MAX = 2 ** 63 - 1

# Unicode spaces; unlike str.split() the \x1c-\x1f separators are not included.
WHITESPACE = "\t\n\v\f\r \x85\xa0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000"
_WHITESPACE_RUN = re.compile(f"[{WHITESPACE}]+")


class Phase(str, Enum):
    """Parser phases, in the order a line is read."""
    FROM = "from"
    PARAMS = "params"
    TO = "to"
    STATUS = "status"
    OPTIONS = "options"
    DONE = "done"


@dataclass
class _LineState:
    """Cursor over the tokens of one line plus the fields read so far."""
    line: str
    line_number: Optional[int]
    tokens: List[str]
    cursor: int = 0
    from_: Optional[str] = None
    to: Optional[str] = None
    status: int = DEFAULT_STATUS
    force: bool = False
    params: Optional[Dict[str, ParamValue]] = None
    options: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def token(self) -> Optional[str]:
        if self.cursor < len(self.tokens):
            return self.tokens[self.cursor]
        return None

    def advance(self) -> None:
        self.cursor += 1


def to_integer(token: str) -> Optional[int]:
    """
    Convert an optionally signed run of ASCII digits that fits in 64 bits.

    Returns:
        The value, or None when the token is not such an integer
    """
    if _INTEGER.fullmatch(token) is None:
        return None
    # Bound the digit count before int() so huge tokens never reach it
    if len(token.lstrip("+-").lstrip("0")) > 19:
        return None
    value = int(token)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def is_integer(token: str) -> bool:
    """Return True for an optionally signed 64-bit run of ASCII digits."""
    return to_integer(token) is not None


def parse_status(token: str) -> Optional[Tuple[int, bool]]:
    """
    Parse a status token.

    Returns:
        (code, force) for `301` or `301!`, None for anything else
    """
    code = to_integer(token)
    if code is not None:
        return code, False
    if token.endswith("!"):
        code = to_integer(token[:-1])
        if code is not None:
            return code, True
    return None


def split_param(token: str) -> Tuple[str, ParamValue]:
    """Split a parameter token on its first `=`; a bare key maps to True."""
    key, sep, value = token.partition("=")
    if not sep:
        return key, True
    return key, value


def split_option(token: str) -> Tuple[str, List[str]]:
    """Split `Key=a,b,c` into the key and its ordered values."""
    key, _, value = token.partition("=")
    return key, value.split(",")


class RuleParser:
    """
    Parse rule definitions from _redirects format.

    The parser keeps no state between calls, so one instance can be shared.
    """

    def __init__(self):
        """Initialize the rule parser."""
        self.valid_options = {COUNTRY_OPTION, LANGUAGE_OPTION}
        self._phases: Dict[Phase, Callable[[_LineState], Phase]] = {
            Phase.FROM: self._read_from,
            Phase.PARAMS: self._read_params,
            Phase.TO: self._read_to,
            Phase.STATUS: self._read_status,
            Phase.OPTIONS: self._read_options,
        }

    def parse(self, stream: Iterable[str]) -> List[Rule]:
        """
        Parse rules from a text stream.

        Args:
            stream: Readable text stream, or any iterable of lines

        Returns:
            Rules in input order

        Raises:
            RuleParseError: On the first malformed line
        """
        rules = []
        for line_number, raw_line in enumerate(stream, 1):
            rule = self.parse_line(raw_line, line_number)
            if rule is None:
                continue
            logger.debug(f"Parsed rule on line {line_number}: {rule.from_} -> {rule.to} ({rule.status})")
            rules.append(rule)
        return rules

    def parse_string(self, text: str) -> List[Rule]:
        """Parse rules from a string."""
        return self.parse(io.StringIO(text))

    def parse_file(self, file_path: Union[str, Path], encoding: str = "utf-8") -> List[Rule]:
        """
        Parse rules from a _redirects file.

        Args:
            file_path: Path to the file
            encoding: Text encoding of the file

        Returns:
            Parsed rules

        Raises:
            RedirectsFileError: If the file cannot be read
            RuleParseError: If a line is malformed
        """
        path = Path(file_path)
        try:
            with open(path, 'r', encoding=encoding) as f:
                rules = self.parse(f)
        except FileNotFoundError:
            raise RedirectsFileError(
                f"Redirects file not found: {path}",
                component="RuleParser",
                context={"path": str(path)}
            )
        except (OSError, UnicodeDecodeError) as e:
            raise RedirectsFileError(
                f"Error reading redirects file {path}: {e}",
                component="RuleParser",
                context={"path": str(path)}
            )

        logger.info(f"Loaded {len(rules)} rules from {path}")
        return rules

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Rule]:
        """
        Parse a single line.

        Returns:
            The rule, or None for blank and comment lines
        """
        line = line.strip(WHITESPACE)
        if not line or line.startswith("#"):
            return None

        tokens = _WHITESPACE_RUN.split(line)
        if len(tokens) < 2:
            raise MissingDestinationError(
                f"missing destination path: {line!r}",
                line=line,
                line_number=line_number
            )

        state = _LineState(line=line, line_number=line_number, tokens=tokens)
        phase = Phase.FROM
        while phase is not Phase.DONE:
            phase = self._phases[phase](state)

        return Rule(
            from_=state.from_,
            to=state.to,
            status=state.status,
            force=state.force,
            params=state.params,
            country=state.options.get(COUNTRY_OPTION),
            language=state.options.get(LANGUAGE_OPTION)
        )

    def _read_from(self, state: _LineState) -> Phase:
        state.from_ = self._check_path(state.token, state)
        state.advance()
        return Phase.PARAMS

    def _read_params(self, state: _LineState) -> Phase:
        token = state.token
        if token is None or "=" not in token:
            return Phase.TO

        key, value = split_param(token)
        if state.params is None:
            state.params = {}
        state.params[key] = value
        state.advance()
        return Phase.PARAMS

    def _read_to(self, state: _LineState) -> Phase:
        if state.token is None:
            raise MissingDestinationError(
                f"missing `to` field, was expecting format {RULE_FORMAT}",
                line=state.line,
                line_number=state.line_number
            )
        state.to = self._check_path(state.token, state)
        state.advance()
        return Phase.STATUS

    def _read_status(self, state: _LineState) -> Phase:
        token = state.token
        if token is None:
            return Phase.DONE

        status = parse_status(token)
        if status is not None:
            state.status, state.force = status
            state.advance()
        elif "=" not in token:
            raise self._format_error(token, state)
        # A key=value token here is left for the options phase.
        return Phase.OPTIONS

    def _read_options(self, state: _LineState) -> Phase:
        token = state.token
        if token is None:
            return Phase.DONE

        if "=" not in token:
            raise self._format_error(token, state)

        key, values = split_option(token)
        if key not in self.valid_options:
            raise UnknownOptionError(
                f"unknown option {key!r} in {token!r}, was expecting format {RULE_FORMAT}",
                line=state.line,
                line_number=state.line_number,
                token=token
            )
        state.options[key] = values
        state.advance()
        return Phase.OPTIONS

    def _check_path(self, token: str, state: _LineState) -> str:
        """Validate a `from` or `to` token and return it unchanged."""
        if is_integer(token):
            reason = "numbers not allowed"
        elif "=" in token:
            reason = "`=` not allowed"
        elif token.endswith("!"):
            reason = "`!` not allowed"
        elif not token.startswith(PATH_PREFIXES):
            reason = "path must start with `/`, `http://`, or `https://`"
        else:
            return token

        raise RuleFormatError(
            f"{reason}. got: {token}, was expecting format {RULE_FORMAT}",
            line=state.line,
            line_number=state.line_number,
            token=token
        )

    @staticmethod
    def _format_error(token: str, state: _LineState) -> RuleFormatError:
        return RuleFormatError(
            f"got: {token}, was expecting format {RULE_FORMAT}",
            line=state.line,
            line_number=state.line_number,
            token=token
        )


_default_parser = RuleParser()


def parse(stream: Iterable[str]) -> List[Rule]:
    """Parse rules from a text stream with the shared parser."""
    return _default_parser.parse(stream)


def parse_string(text: str) -> List[Rule]:
    """Parse rules from a string with the shared parser."""
    return _default_parser.parse_string(text)


def parse_file(file_path: Union[str, Path], encoding: str = "utf-8") -> List[Rule]:
    """Parse rules from a file with the shared parser."""
    return _default_parser.parse_file(file_path, encoding=encoding)


def must(parse_callable: Callable[[], List[Rule]]) -> List[Rule]:
    """
    Run a parse and exit the process if it fails.

    Intended for build scripts where a broken _redirects file should stop
    the build, e.g. `must(lambda: parse_file("_redirects"))`.

    Raises:
        SystemExit: With status 1 on any RedirectsError
    """
    try:
        return parse_callable()
    except RedirectsError as e:
        logger.error(f"Failed to parse redirects: {e}")
        raise SystemExit(1) from e
