import logging

import pytest

import config
from redirects.parser import RuleParser

SAMPLE_REDIRECTS = """
# Implicit 301 redirects
/home              /
/blog/my-post.php  /blog/my-post
/google            https://www.google.com

# Rewrite a path
/pass-through /index.html    200

# Forcing
/app/*  /app/index.html  200!

# Params
/articles id=:id tag=:tag /posts/:tag/:id 301!

# Country & Language
/israel/*  /israel/he/:splat  302  Country=au,nz Language=he
"""

REDIRECTS_ENV_VARS = (
    "REDIRECTS_ENVIRONMENT",
    "REDIRECTS_LOG_LEVEL",
    "REDIRECTS_FILE",
    "REDIRECTS_ENCODING",
    "REDIRECTS_OUTPUT_FORMAT",
    "REDIRECTS_JSON_INDENT",
)


@pytest.fixture
def parser():
    return RuleParser()


@pytest.fixture
def sample_redirects():
    return SAMPLE_REDIRECTS


@pytest.fixture
def redirects_file(tmp_path, sample_redirects):
    """A _redirects file on disk holding the sample rules."""
    path = tmp_path / "_redirects"
    path.write_text(sample_redirects, encoding="utf-8")
    return path


@pytest.fixture
def clean_env(monkeypatch):
    """Remove REDIRECTS_* overrides and reset the config singleton."""
    for name in REDIRECTS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_config_manager", None)
    return monkeypatch


@pytest.fixture
def restore_logging():
    """Put the root logger back the way it was after setup_logging runs."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
