"""Shared test fixtures for the analyze_gateway test suite.

WHY: Several modules exercise the same sample bodies (plain text, inline
tokenizer settings, mixed filter chains). Centralizing them keeps the
examples consistent across parser, assembler and API tests.

HOW: Plain constants for bodies, plus fixtures for a lenient and a
strict field matcher and for a known default attribute set.

RULES:
- Bodies are bytes, exactly as they would arrive over HTTP
- Tests never depend on the developer's .env (default attributes are
  pinned through monkeypatch where they matter)
"""

import json

import pytest

from analyze_gateway import config
from analyze_gateway.core.fields import ParseFieldMatcher


NGRAM_TOKENIZER = {"type": "ngram", "min_gram": 2, "max_gram": 3, "token_chars": ["letter"]}

FULL_CHAIN_BODY = json.dumps({
    "text": ["Quick <b>brown</b> foxes", "lazy dogs"],
    "tokenizer": "standard",
    "filter": ["lowercase", {"type": "stop", "stopwords": ["a", "the"]}],
    "char_filter": ["html_strip", {"type": "mapping", "mappings": ["ph => f"]}],
    "explain": True,
    "attributes": ["keyword", "position"],
}).encode("utf-8")

YAML_BODY = b"""---
text:
  - one two
  - three
tokenizer:
  type: ngram
  min_gram: 2
filter: [lowercase]
explain: true
"""


@pytest.fixture
def matcher():
    """A lenient matcher (deprecated spellings warn, not fail)."""
    return ParseFieldMatcher(strict=False)


@pytest.fixture
def strict_matcher():
    return ParseFieldMatcher(strict=True)


@pytest.fixture
def default_attributes(monkeypatch):
    """Pin the configured default attribute set to a known non-empty value."""
    monkeypatch.setattr(config, "DEFAULT_ATTRIBUTES", ("keyword",))
    return ["keyword"]


@pytest.fixture
def no_default_attributes(monkeypatch):
    monkeypatch.setattr(config, "DEFAULT_ATTRIBUTES", ())
    return []


@pytest.fixture
def ngram_tokenizer():
    return dict(NGRAM_TOKENIZER)


@pytest.fixture
def full_chain_body():
    return FULL_CHAIN_BODY


@pytest.fixture
def yaml_body():
    return YAML_BODY
