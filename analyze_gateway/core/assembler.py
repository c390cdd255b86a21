"""Assemble an AnalyzeRequest from query parameters and an optional body.

WHY: The HTTP handler and the CLI both receive the same two inputs and
must apply the same precedence: parameters first, then whatever the
body says. Keeping that order in one function means there is exactly
one place that decides which source wins.

HOW: bind_params() builds the request; if a body is present its content
type is resolved. A structured body is parsed on top of the bound
request (body fields replace parameter fields). An unstructured body
becomes the text to analyze, but only if no text was bound yet.

RULES:
- Parameters are always bound first
- Structured body wins per field, not per request (a body filter or
  char_filter array replaces the whole list bound from parameters)
- Unstructured body is used as text only when params supplied no text
- Unstructured body bytes are decoded as UTF-8 (invalid bytes replaced)
- No cross-field validation; the engine decides what is legal
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from analyze_gateway.core.body import build_from_content
from analyze_gateway.core.fields import ParseFieldMatcher
from analyze_gateway.core.params import ParamSource, RequestParams, bind_params
from analyze_gateway.core.request import AnalyzeRequest
from analyze_gateway.core.xcontent import ContentType, resolve_content_type

logger = logging.getLogger(__name__)


def assemble_request(
    params: Union[RequestParams, ParamSource, None],
    body: Optional[Union[bytes, str]] = None,
    content_type: Union[str, ContentType, None] = None,
    index: Optional[str] = None,
    matcher: Optional[ParseFieldMatcher] = None,
) -> AnalyzeRequest:
    """Build the finished AnalyzeRequest for one analyze call.

    Args:
        params: Query parameters.
        body: Raw request body, or None/empty when the call has none.
        content_type: Declared Content-Type of the body, if any. When it
            is not a recognized structured type the body is sniffed.
        index: Index name from the URL path, if any.
        matcher: Field-name matcher for the body parser.

    Returns:
        The populated AnalyzeRequest.

    Raises:
        MalformedRequestError: If a structured body is malformed.
    """
    request = bind_params(params, index=index)

    if not body:
        return request

    raw = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    resolved = resolve_content_type(raw, content_type)
    if resolved is None:
        if not request.text:
            logger.debug("Using unstructured body (%d bytes) as text", len(raw))
            request.set_text(raw.decode("utf-8", errors="replace"))
        return request

    logger.debug("Parsing %s request body (%d bytes)", resolved.name, len(raw))
    build_from_content(raw, request, matcher=matcher, content_type=resolved)
    return request
