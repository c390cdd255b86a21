"""Recognized body field names and the alias-tolerant matcher.

WHY: Clients spell body keys in more than one way. Older clients send
camelCase ("charFilter") where the canonical name is snake_case
("char_filter"). The body parser asks a matcher whether the current
key means a given field instead of comparing strings itself, so alias
handling lives in one place.

HOW: ParseField holds the canonical name plus deprecated aliases (the
camelCase spelling is always added). ParseFieldMatcher accepts the
canonical name silently, accepts aliases with a logged warning, or
rejects aliases outright in strict mode.

RULES:
- Canonical names match exactly (case-sensitive)
- Deprecated names: warning in lenient mode, MalformedRequestError in strict mode
- Strict mode defaults to config.STRICT_PARSING
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from analyze_gateway import config
from analyze_gateway.core.errors import MalformedRequestError

logger = logging.getLogger(__name__)


def to_camel_case(name: str) -> str:
    """Convert a snake_case name to camelCase ("char_filter" → "charFilter")."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest if part)


class ParseField:
    """A recognized field name with its deprecated spellings."""

    def __init__(self, name: str, *deprecated_names: str) -> None:
        self.name = name
        aliases = []
        for candidate in (to_camel_case(name),) + deprecated_names:
            if candidate != name and candidate not in aliases:
                aliases.append(candidate)
        self.deprecated_names: Tuple[str, ...] = tuple(aliases)

    def all_names(self) -> Tuple[str, ...]:
        return (self.name,) + self.deprecated_names

    def __repr__(self) -> str:
        return "ParseField({!r})".format(self.name)


class ParseFieldMatcher:
    """Decides whether a body key refers to a given ParseField.

    RULES:
    - match(None, field) is always False (no key seen yet)
    - strict=True turns deprecated spellings into MalformedRequestError
    """

    def __init__(self, strict: Optional[bool] = None) -> None:
        self.strict = config.STRICT_PARSING if strict is None else strict

    def match(self, field_name: Optional[str], parse_field: ParseField) -> bool:
        if field_name is None:
            return False
        if field_name == parse_field.name:
            return True
        if field_name in parse_field.deprecated_names:
            message = "Deprecated field [{}] used, expected [{}] instead".format(
                field_name, parse_field.name
            )
            if self.strict:
                raise MalformedRequestError(message)
            logger.warning(message)
            return True
        return False


class Fields:
    """Body keys understood by the analyze request parser."""

    ANALYZER = ParseField("analyzer")
    TEXT = ParseField("text")
    FIELD = ParseField("field")
    TOKENIZER = ParseField("tokenizer")
    TOKEN_FILTERS = ParseField("filter")
    CHAR_FILTERS = ParseField("char_filter")
    EXPLAIN = ParseField("explain")
    ATTRIBUTES = ParseField("attributes")
