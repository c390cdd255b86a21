"""Body content-type resolution and forward-only token cursors.

WHY: The body parser must walk a structured body one token at a time,
dispatching on the field it is in, without caring whether the client
sent JSON or YAML. It also needs to know when a body is NOT structured
at all, so the raw bytes can be used as the text to analyze.

HOW: resolve_content_type() trusts a recognized Content-Type header and
otherwise sniffs the first bytes. create_parser() returns a TokenCursor
for the resolved type inside a context manager:
  JsonTokenCursor — decodes with the json module (keeping duplicate keys
                    and the source spelling of numbers) and walks the
                    result as a token sequence
  YamlTokenCursor — pulls events straight from a PyYAML SafeLoader

RULES:
- Cursors only move forward; there is no peek or rewind
- next_token() returns None once the top-level value is exhausted
- Syntax errors raise ContentParseError (callers wrap it)
- Sniffing: "---" prefix → YAML, first non-blank byte "{" → JSON, else None
- Cursors are always closed, including when parsing fails
- Non-finite numbers, unbuildable tagged YAML scalars and nesting deeper
  than MAX_NESTING_DEPTH raise ContentParseError
"""

from __future__ import annotations

import enum
import json
import math
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from analyze_gateway.core.errors import ContentParseError

_UTF8_BOM = b"\xef\xbb\xbf"

# Deepest object/array nesting a body may use.
MAX_NESTING_DEPTH = 100

_JSON_MEDIA_TYPES = frozenset({"application/json", "text/json"})
_YAML_MEDIA_TYPES = frozenset({
    "application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml",
})


class ContentType(str, enum.Enum):
    """Structured body formats the parser understands."""

    JSON = "application/json"
    YAML = "application/yaml"


class Token(enum.Enum):
    START_OBJECT = "START_OBJECT"
    END_OBJECT = "END_OBJECT"
    START_ARRAY = "START_ARRAY"
    END_ARRAY = "END_ARRAY"
    FIELD_NAME = "FIELD_NAME"
    VALUE_STRING = "VALUE_STRING"
    VALUE_NUMBER = "VALUE_NUMBER"
    VALUE_BOOLEAN = "VALUE_BOOLEAN"
    VALUE_NULL = "VALUE_NULL"

    @property
    def is_value(self) -> bool:
        """True for scalar tokens that carry text (null excluded)."""
        return self in (Token.VALUE_STRING, Token.VALUE_NUMBER, Token.VALUE_BOOLEAN)

    def __str__(self) -> str:
        return self.value


# (token, python value, source text)
Event = Tuple[Token, Any, Optional[str]]


# ---------------------------------------------------------------------------
# Content-type resolution
# ---------------------------------------------------------------------------


def media_type_to_content_type(declared: Union[str, ContentType, None]) -> Optional[ContentType]:
    """Map a Content-Type header value to a ContentType, or None."""
    if declared is None:
        return None
    if isinstance(declared, ContentType):
        return declared
    media = declared.split(";", 1)[0].strip().lower()
    if media in _JSON_MEDIA_TYPES or media.endswith("+json"):
        return ContentType.JSON
    if media in _YAML_MEDIA_TYPES or media.endswith("+yaml"):
        return ContentType.YAML
    return None


def sniff_content_type(content: bytes) -> Optional[ContentType]:
    """Guess the structured format of a body from its leading bytes."""
    if content.startswith(_UTF8_BOM):
        content = content[len(_UTF8_BOM):]
    if not content:
        return None
    if content.startswith(b"---"):
        return ContentType.YAML
    if content.lstrip().startswith(b"{"):
        return ContentType.JSON
    return None


def resolve_content_type(
    content: bytes,
    declared: Union[str, ContentType, None] = None,
) -> Optional[ContentType]:
    """Declared structured type first, sniffed type second, else None."""
    return media_type_to_content_type(declared) or sniff_content_type(content)


# ---------------------------------------------------------------------------
# Cursor base
# ---------------------------------------------------------------------------


class TokenCursor(ABC):
    """Pull-based, forward-only view of a structured document.

    Subclasses produce events; the base class tracks the current token,
    the last field name, and offers value helpers shared by all formats.
    """

    def __init__(self) -> None:
        self._token: Optional[Token] = None
        self._value: Any = None
        self._text: Optional[str] = None
        self._name: Optional[str] = None
        self._depth = 0
        self._closed = False

    @abstractmethod
    def _next_event(self) -> Optional[Event]:
        """Return the next event, or None at the end of the document."""

    def _release(self) -> None:
        """Free format-specific resources (override as needed)."""

    def __enter__(self) -> TokenCursor:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._release()

    def next_token(self) -> Optional[Token]:
        if self._closed:
            raise ContentParseError("cursor is closed")
        event = self._next_event()
        if event is None:
            self._token = self._value = self._text = None
            return None
        self._token, self._value, self._text = event
        if self._token is Token.FIELD_NAME:
            self._name = self._value
        elif self._token in (Token.START_OBJECT, Token.START_ARRAY):
            self._depth += 1
            if self._depth > MAX_NESTING_DEPTH:
                raise ContentParseError(
                    "content is nested deeper than {} levels".format(MAX_NESTING_DEPTH)
                )
        elif self._token in (Token.END_OBJECT, Token.END_ARRAY):
            self._depth -= 1
        return self._token

    @property
    def current_token(self) -> Optional[Token]:
        return self._token

    def current_name(self) -> Optional[str]:
        return self._name

    def text(self) -> Optional[str]:
        """Source text of the current scalar or field name."""
        return self._text

    def value(self) -> Any:
        """Python value of the current scalar token."""
        return self._value

    def is_boolean_value(self) -> bool:
        if self._token is Token.VALUE_BOOLEAN:
            return True
        return self._token is Token.VALUE_STRING and self._value in ("true", "false")

    def boolean_value(self) -> bool:
        if self._token is Token.VALUE_BOOLEAN:
            return bool(self._value)
        if self.is_boolean_value():
            return self._value == "true"
        raise ContentParseError(
            "current token [{}] is not a boolean".format(self._token)
        )

    def map(self) -> Dict[str, Any]:
        """Consume the object the cursor is on and return it as a dict.

        The cursor must be positioned on START_OBJECT; afterwards it sits
        on the matching END_OBJECT.
        """
        if self._token is not Token.START_OBJECT:
            raise ContentParseError(
                "expected [START_OBJECT] to read a map, found [{}]".format(self._token)
            )
        try:
            return self._read_object()
        except RecursionError as exc:
            raise ContentParseError("content is nested too deeply") from exc

    def _read_object(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        while True:
            token = self.next_token()
            if token is Token.END_OBJECT:
                return result
            if token is not Token.FIELD_NAME:
                raise ContentParseError(
                    "expected a field name, found [{}]".format(token)
                )
            key = self._name
            self.next_token()
            result[key] = self._read_value()

    def _read_value(self) -> Any:
        token = self._token
        if token is Token.START_OBJECT:
            return self._read_object()
        if token is Token.START_ARRAY:
            items: List[Any] = []
            while True:
                if self.next_token() is Token.END_ARRAY:
                    return items
                items.append(self._read_value())
        if token is None or not (token.is_value or token is Token.VALUE_NULL):
            raise ContentParseError("unexpected token [{}]".format(token))
        return self._value


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class _Pairs(list):
    """Object members in document order (duplicates kept)."""


class _RawNumber(str):
    """A JSON number kept in its source spelling."""

    def to_number(self) -> Union[int, float]:
        try:
            return int(self)
        except ValueError:
            pass
        value = float(self)
        if not math.isfinite(value):
            raise ContentParseError("number [{}] is out of range".format(self))
        return value


def _reject_constant(name: str) -> None:
    raise ContentParseError("non-finite number [{}] is not allowed".format(name))


def _walk_json(node: Any) -> Iterator[Event]:
    if isinstance(node, _Pairs):
        yield Token.START_OBJECT, None, None
        for key, value in node:
            yield Token.FIELD_NAME, key, key
            yield from _walk_json(value)
        yield Token.END_OBJECT, None, None
    elif isinstance(node, list):
        yield Token.START_ARRAY, None, None
        for item in node:
            yield from _walk_json(item)
        yield Token.END_ARRAY, None, None
    elif isinstance(node, bool):
        yield Token.VALUE_BOOLEAN, node, "true" if node else "false"
    elif node is None:
        yield Token.VALUE_NULL, None, None
    elif isinstance(node, _RawNumber):
        yield Token.VALUE_NUMBER, node.to_number(), str(node)
    else:
        yield Token.VALUE_STRING, node, node


class JsonTokenCursor(TokenCursor):
    """Token cursor over a JSON document."""

    def __init__(self, content: Union[bytes, str]) -> None:
        super().__init__()
        try:
            document = json.loads(
                content,
                object_pairs_hook=_Pairs,
                parse_int=_RawNumber,
                parse_float=_RawNumber,
                parse_constant=_reject_constant,
            )
        except ContentParseError:
            raise
        except (ValueError, RecursionError) as exc:
            raise ContentParseError("invalid JSON: {}".format(exc)) from exc
        self._events = _walk_json(document)

    def _next_event(self) -> Optional[Event]:
        return next(self._events, None)

    def _release(self) -> None:
        self._events.close()


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------

_YAML_BOOL = "tag:yaml.org,2002:bool"
_YAML_NULL = "tag:yaml.org,2002:null"
_YAML_NUMBERS = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})


class YamlTokenCursor(TokenCursor):
    """Token cursor pulling events from a PyYAML SafeLoader.

    Only the first document of the stream is read. Mapping keys become
    FIELD_NAME tokens; scalars are typed with the loader's implicit
    resolver (so ``true``, ``42`` and ``~`` come through as boolean,
    number and null).
    """

    def __init__(self, content: Union[bytes, str]) -> None:
        super().__init__()
        try:
            self._loader = yaml.SafeLoader(content)
        except yaml.YAMLError as exc:
            raise ContentParseError("invalid YAML: {}".format(exc)) from exc
        # One frame per open collection: ["map", expecting_key] or ["seq", False]
        self._frames: List[List[Any]] = []
        self._finished = False

    def _get_event(self) -> Any:
        try:
            return self._loader.get_event()
        except yaml.YAMLError as exc:
            raise ContentParseError("invalid YAML: {}".format(exc)) from exc

    def _next_event(self) -> Optional[Event]:
        while not self._finished:
            event = self._get_event()
            if isinstance(event, (yaml.StreamStartEvent, yaml.DocumentStartEvent)):
                continue
            if event is None or isinstance(event, (yaml.DocumentEndEvent, yaml.StreamEndEvent)):
                self._finished = True
                return None
            if isinstance(event, yaml.AliasEvent):
                raise ContentParseError("YAML aliases are not supported in request bodies")

            frame = self._frames[-1] if self._frames else None
            in_key_position = frame is not None and frame[0] == "map" and frame[1]

            if isinstance(event, (yaml.MappingEndEvent, yaml.SequenceEndEvent)):
                self._frames.pop()
                if isinstance(event, yaml.MappingEndEvent):
                    return Token.END_OBJECT, None, None
                return Token.END_ARRAY, None, None

            if in_key_position:
                if not isinstance(event, yaml.ScalarEvent):
                    raise ContentParseError("YAML mapping keys must be scalars")
                frame[1] = False
                return Token.FIELD_NAME, event.value, event.value

            # A value: the enclosing mapping expects a key again afterwards.
            if frame is not None and frame[0] == "map":
                frame[1] = True

            if isinstance(event, yaml.MappingStartEvent):
                self._frames.append(["map", True])
                return Token.START_OBJECT, None, None
            if isinstance(event, yaml.SequenceStartEvent):
                self._frames.append(["seq", False])
                return Token.START_ARRAY, None, None
            if isinstance(event, yaml.ScalarEvent):
                return self._scalar(event)
            raise ContentParseError("unexpected YAML event {}".format(type(event).__name__))
        return None

    def _scalar(self, event: Any) -> Event:
        tag = event.tag
        if tag is None or tag == "!":
            tag = self._loader.resolve(yaml.ScalarNode, event.value, event.implicit)
        if tag == _YAML_BOOL or tag == _YAML_NULL or tag in _YAML_NUMBERS:
            node = yaml.ScalarNode(tag, event.value, event.start_mark, event.end_mark, style=event.style)
            try:
                value = self._loader.construct_object(node, deep=True)
            except (yaml.YAMLError, ValueError, KeyError, TypeError) as exc:
                raise ContentParseError(
                    "invalid YAML scalar [{}]: {}".format(event.value, exc)
                ) from exc
            if isinstance(value, float) and not math.isfinite(value):
                raise ContentParseError("number [{}] is out of range".format(event.value))
            if tag == _YAML_BOOL:
                return Token.VALUE_BOOLEAN, value, "true" if value else "false"
            if tag == _YAML_NULL:
                return Token.VALUE_NULL, None, None
            return Token.VALUE_NUMBER, value, event.value
        return Token.VALUE_STRING, event.value, event.value

    def _release(self) -> None:
        self._loader.dispose()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@contextmanager
def create_parser(
    content: Union[bytes, str],
    content_type: ContentType = ContentType.JSON,
) -> Iterator[TokenCursor]:
    """Open a TokenCursor for ``content``; the cursor is closed on exit.

    Raises:
        ContentParseError: If the content cannot be decoded at all.
    """
    if content_type is ContentType.YAML:
        cursor: TokenCursor = YamlTokenCursor(content)
    else:
        cursor = JsonTokenCursor(content)
    try:
        yield cursor
    finally:
        cursor.close()
