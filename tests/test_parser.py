import io

import pytest

from exceptions import (
    MissingDestinationError,
    RedirectsFileError,
    RuleFormatError,
    RuleParseError,
    UnknownOptionError
)
from redirects.models import Params, Rule
from redirects.parser import RULE_FORMAT, must, parse, parse_file, parse_string


def test_implicit_redirects():
    rules = parse_string("/home /\n/blog/a.php /blog/a\n")

    assert rules == [
        Rule(from_="/home", to="/"),
        Rule(from_="/blog/a.php", to="/blog/a"),
    ]
    for rule in rules:
        assert rule.status == 301
        assert rule.force is False


def test_defaults_leave_optional_fields_absent(parser):
    rule = parser.parse_string("/from /to")[0]

    assert rule.status == 301
    assert rule.force is False
    assert rule.params is None
    assert rule.country is None
    assert rule.language is None


def test_forced_status(parser):
    rules = parser.parse_string("/app/* /app/index.html 200!\n")

    assert rules == [Rule(from_="/app/*", to="/app/index.html", status=200, force=True)]


def test_plain_status(parser):
    rule = parser.parse_string("/my-redirect / 302")[0]

    assert rule.status == 302
    assert rule.force is False


def test_params_between_from_and_to(parser):
    rule = parser.parse_string("/articles id=:id tag=:tag /posts/:tag/:id\n")[0]

    assert rule.from_ == "/articles"
    assert rule.to == "/posts/:tag/:id"
    assert rule.status == 301
    assert rule.params == {"id": ":id", "tag": ":tag"}
    assert isinstance(rule.params, Params)


def test_param_splits_on_first_equals_only(parser):
    rule = parser.parse_string("/a k=v=w empty= /b")[0]

    assert rule.params == {"k": "v=w", "empty": ""}


def test_country_and_language_options(parser):
    rule = parser.parse_string("/from /to 302 Country=au,nz Language=he")[0]

    assert rule.status == 302
    assert rule.country == ("au", "nz")
    assert rule.language == ("he",)


def test_full_line_with_params_force_and_options(parser):
    rule = parser.parse_string("/israel/* splat=:splat /israel/he/:splat 302! Country=au,nz Language=he")[0]

    assert rule == Rule(
        from_="/israel/*",
        to="/israel/he/:splat",
        status=302,
        force=True,
        params={"splat": ":splat"},
        country=["au", "nz"],
        language=["he"]
    )


def test_option_in_status_slot_keeps_default_status(parser):
    rule = parser.parse_string("/ /auzy Country=au")[0]

    assert rule.status == 301
    assert rule.force is False
    assert rule.country == ("au",)
    assert rule.params is None


def test_repeated_option_last_wins(parser):
    rule = parser.parse_string("/ /x 302 Country=au Country=nz,gb")[0]

    assert rule.country == ("nz", "gb")
    assert rule.language is None


def test_comments_and_blank_lines_are_skipped(parser):
    text = "\n   \n# a comment\n    # indented comment\n\t\n/a /b\n"

    rules = parser.parse_string(text)

    assert len(rules) == 1
    assert parser.parse_string("# only comments\n\n   \n") == []


def test_whitespace_and_crlf_are_tolerated(parser):
    rules = parser.parse_string("\t/a\t\t/b   302  \r\n  /c /d\r\n")

    assert rules == [Rule(from_="/a", to="/b", status=302), Rule(from_="/c", to="/d")]


def test_absolute_destination(parser):
    rule = parser.parse_string("/api/*  https://api.example.com/:splat  200")[0]

    assert rule.to == "https://api.example.com/:splat"
    assert rule.is_proxy()
    assert rule.is_rewrite()


def test_sample_file_order_is_preserved(parser, sample_redirects):
    rules = parser.parse_string(sample_redirects)

    assert [rule.from_ for rule in rules] == [
        "/home",
        "/blog/my-post.php",
        "/google",
        "/pass-through",
        "/app/*",
        "/articles",
        "/israel/*",
    ]


def test_parse_is_deterministic(parser, sample_redirects):
    assert parser.parse_string(sample_redirects) == parser.parse_string(sample_redirects)


def test_parse_accepts_streams_and_line_lists():
    assert parse(io.StringIO("/a /b\n")) == [Rule(from_="/a", to="/b")]
    assert parse(["/a /b\n", "# skipped\n", "/c /d 307\n"]) == [
        Rule(from_="/a", to="/b"),
        Rule(from_="/c", to="/d", status=307),
    ]


def test_single_token_is_missing_destination(parser):
    with pytest.raises(MissingDestinationError) as exc_info:
        parser.parse_string("/from")

    assert exc_info.value.line == "/from"
    assert exc_info.value.line_number == 1


def test_params_without_to_is_missing_destination(parser):
    with pytest.raises(MissingDestinationError) as exc_info:
        parser.parse_string("/from a=1 b=2")

    assert "missing `to` field" in exc_info.value.message


@pytest.mark.parametrize("line", [
    "123 /to",
    "/from=x /to",
    "/from! /to",
    "from /to",
])
def test_bad_from_is_format_error(parser, line):
    with pytest.raises(RuleFormatError) as exc_info:
        parser.parse_string(line)

    assert exc_info.value.token == line.split()[0]
    assert RULE_FORMAT in exc_info.value.message


@pytest.mark.parametrize("line", [
    "/from 404",
    "/from /to! 301",
    "/from relative 301",
])
def test_bad_to_is_format_error(parser, line):
    with pytest.raises(RuleFormatError):
        parser.parse_string(line)


@pytest.mark.parametrize("line", [
    "/from /to bogus",
    "/from /to 302!!",
    "/from /to 302 bogus",
    "/from /to 302 Country=au extra",
])
def test_unrecognized_status_or_option_token(parser, line):
    with pytest.raises(RuleFormatError):
        parser.parse_string(line)


@pytest.mark.parametrize("token", [
    "9" * 5000,
    "99999999999999999999",
    "9223372036854775808",
    "-9223372036854775809!",
])
def test_status_outside_64_bits_is_format_error(parser, token):
    with pytest.raises(RuleFormatError) as exc_info:
        parser.parse_string(f"/a /b {token}")

    assert exc_info.value.token == token


def test_status_at_64_bit_bounds_and_leading_zeros(parser):
    rules = parser.parse_string(
        "/a /b 9223372036854775807\n"
        "/c /d 000000000000000000000000302!\n"
    )

    assert rules[0].status == 2 ** 63 - 1
    assert (rules[1].status, rules[1].force) == (302, True)


def test_must_exits_on_oversized_status():
    with pytest.raises(SystemExit) as exc_info:
        must(lambda: parse_string("/a /b " + "9" * 5000))

    assert exc_info.value.code == 1


def test_unicode_spaces_separate_tokens(parser):
    rule = parser.parse_string("\u3000/a\u00a0/b\u2003302\u0085")[0]

    assert (rule.from_, rule.to, rule.status) == ("/a", "/b", 302)


def test_information_separators_stay_inside_tokens(parser):
    rule = parser.parse_string("/a\x1c/b /c")[0]

    assert rule.from_ == "/a\x1c/b"
    assert rule.to == "/c"


def test_unknown_option_key(parser):
    with pytest.raises(UnknownOptionError) as exc_info:
        parser.parse_string("/ /something 302 foo=bar")

    assert exc_info.value.token == "foo=bar"


def test_option_keys_are_case_sensitive(parser):
    with pytest.raises(UnknownOptionError):
        parser.parse_string("/ /something 302 country=au")


def test_error_aborts_whole_parse_with_line_number(parser):
    text = "/ok /fine\n# comment\n/broken 123\n/never /reached\n"

    with pytest.raises(RuleParseError) as exc_info:
        parser.parse_string(text)

    error = exc_info.value
    assert error.line_number == 3
    assert error.line == "/broken 123"
    assert str(error).startswith("line 3: ")
    assert error.to_dict()["context"]["token"] == "123"


def test_parse_file(redirects_file):
    rules = parse_file(redirects_file)

    assert len(rules) == 7
    assert rules[-1].language == ("he",)


def test_parse_file_missing(tmp_path):
    with pytest.raises(RedirectsFileError):
        parse_file(tmp_path / "missing")


def test_must_returns_rules():
    rules = must(lambda: parse_string("/a /b"))

    assert rules == [Rule(from_="/a", to="/b")]


def test_must_exits_on_error():
    with pytest.raises(SystemExit) as exc_info:
        must(lambda: parse_string("/a"))

    assert exc_info.value.code == 1
