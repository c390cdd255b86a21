"""Structured request body parsing into an AnalyzeRequest.

WHY: A structured body can say everything query parameters can, plus
inline tokenizer/filter definitions that parameters cannot express.
Every recognized key has a strict value shape; anything else must be
rejected loudly so the client learns about the typo instead of getting
an analysis of the wrong thing.

HOW: One forward pass over a TokenCursor. The loop keeps the current
field name as explicit state; each value token is dispatched on that
field. Arrays of names-or-settings and arrays of plain strings are read
by dedicated sub-loops. Values overwrite what the parameters bound.

RULES:
- First token must be START_OBJECT ("Malformed content, must start with an object")
- text: string, or array of scalar values
- analyzer / field: string only
- tokenizer: string → NameSpec, object → SettingsSpec
- filter / char_filter: array of strings and/or objects; replaces the
  list bound from parameters, entries kept in order
- explain: boolean, or the strings "true"/"false"
- attributes: array of scalar values
- Any other key or shape: MalformedRequestError naming field and token
- Syntax errors: MalformedRequestError("Failed to parse request body") with cause
- The request may be left half-filled on error; callers must discard it
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from analyze_gateway.core.errors import ContentParseError, MalformedRequestError
from analyze_gateway.core.fields import Fields, ParseFieldMatcher
from analyze_gateway.core.request import AnalyzeRequest, FieldSpec
from analyze_gateway.core.xcontent import ContentType, Token, TokenCursor, create_parser

logger = logging.getLogger(__name__)


def _read_scalar_array(cursor: TokenCursor, field_name: str, what: str) -> List[str]:
    """Collect the text of every element of the array the cursor is on."""
    values: List[str] = []
    while True:
        token = cursor.next_token()
        if token is Token.END_ARRAY:
            return values
        if token is None or not token.is_value:
            raise MalformedRequestError(
                "{} array element should only contain {}".format(field_name, what)
            )
        values.append(cursor.text())


def _read_spec_array(cursor: TokenCursor, field_name: str, what: str) -> List[FieldSpec]:
    """Collect a FieldSpec for every element of the array the cursor is on."""
    specs: List[FieldSpec] = []
    while True:
        token = cursor.next_token()
        if token is Token.END_ARRAY:
            return specs
        if token is Token.VALUE_STRING:
            specs.append(FieldSpec.from_name(cursor.text()))
        elif token is Token.START_OBJECT:
            specs.append(FieldSpec.from_settings(cursor.map()))
        else:
            raise MalformedRequestError(
                "{} array element should contain {}'s name or setting".format(field_name, what)
            )


def _parse(cursor: TokenCursor, request: AnalyzeRequest, matcher: ParseFieldMatcher) -> None:
    if cursor.next_token() is not Token.START_OBJECT:
        raise MalformedRequestError("Malformed content, must start with an object")

    current_field: Optional[str] = None
    while True:
        token = cursor.next_token()
        if token is Token.END_OBJECT:
            return
        if token is None:
            raise ContentParseError("unexpected end of content")

        if token is Token.FIELD_NAME:
            current_field = cursor.current_name()
        elif matcher.match(current_field, Fields.TEXT) and token is Token.VALUE_STRING:
            request.set_text(cursor.text())
        elif matcher.match(current_field, Fields.TEXT) and token is Token.START_ARRAY:
            request.set_text(*_read_scalar_array(cursor, current_field, "text"))
        elif matcher.match(current_field, Fields.ANALYZER) and token is Token.VALUE_STRING:
            request.analyzer = cursor.text()
        elif matcher.match(current_field, Fields.FIELD) and token is Token.VALUE_STRING:
            request.field = cursor.text()
        elif matcher.match(current_field, Fields.TOKENIZER):
            if token is Token.VALUE_STRING:
                request.set_tokenizer(FieldSpec.from_name(cursor.text()))
            elif token is Token.START_OBJECT:
                request.set_tokenizer(FieldSpec.from_settings(cursor.map()))
            else:
                raise MalformedRequestError(
                    "{} should be tokenizer's name or setting".format(current_field)
                )
        elif matcher.match(current_field, Fields.TOKEN_FILTERS) and token is Token.START_ARRAY:
            request.set_token_filters(*_read_spec_array(cursor, current_field, "filter"))
        elif matcher.match(current_field, Fields.CHAR_FILTERS) and token is Token.START_ARRAY:
            request.set_char_filters(*_read_spec_array(cursor, current_field, "char filter"))
        elif matcher.match(current_field, Fields.EXPLAIN):
            if not cursor.is_boolean_value():
                raise MalformedRequestError(
                    "{} must be either 'true' or 'false'".format(current_field)
                )
            request.explain = cursor.boolean_value()
        elif matcher.match(current_field, Fields.ATTRIBUTES) and token is Token.START_ARRAY:
            request.set_attributes(*_read_scalar_array(cursor, current_field, "attribute name"))
        else:
            raise MalformedRequestError(
                "Unknown parameter [{}] in request body or parameter is of the wrong type[{}] ".format(
                    current_field, token
                )
            )


def build_from_content(
    content: Union[bytes, str],
    request: AnalyzeRequest,
    matcher: Optional[ParseFieldMatcher] = None,
    content_type: ContentType = ContentType.JSON,
) -> None:
    """Parse a structured body and overwrite the matching request fields.

    Args:
        content: Raw body (JSON or YAML).
        request: Request already bound from query parameters; mutated in place.
        matcher: Field-name matcher; a default (config-driven) one if omitted.
        content_type: Format of ``content``.

    Raises:
        MalformedRequestError: On any shape error or unparsable content.
    """
    matcher = matcher or ParseFieldMatcher()
    try:
        with create_parser(content, content_type) as cursor:
            _parse(cursor, request, matcher)
    except ContentParseError as exc:
        logger.debug("Request body could not be parsed: %s", exc)
        raise MalformedRequestError("Failed to parse request body") from exc
