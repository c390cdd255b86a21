"""Exception types raised while assembling an analyze request."""

from __future__ import annotations


class MalformedRequestError(ValueError):
    """Raised when the request body cannot be turned into an AnalyzeRequest.

    WHY: Callers (HTTP layer, CLI) need one error category for every
    shape or syntax problem in the input so they can answer "bad request"
    without inspecting the cause.

    HOW: Raised by the body parser for unexpected tokens and wrong value
    shapes, and used to wrap syntax errors from the token layer. The
    original exception is chained as __cause__ for diagnostics only.

    RULES:
    - The message is user-facing and names the offending field or token
    - Never retried; the caller discards the partially built request
    """


class ContentParseError(ValueError):
    """Raised by a token cursor when the body is not valid JSON/YAML."""
