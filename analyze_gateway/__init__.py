"""Analyze Gateway: request front-end for a text-analysis endpoint.

WHY: An ``_analyze`` call can describe its analysis chain in two places
at once: flat URL query parameters and an optional structured body. The
tokenizer and each filter may be a registered name or an inline settings
object. Something has to merge those sources into one well-typed request
before an analysis engine can run it.

HOW: Query parameters are bound first, then the optional body
(JSON or YAML) is parsed over a forward-only token cursor, and the finished
AnalyzeRequest goes to a pluggable engine. The HTTP API and the CLI are thin
wrappers around the same assembler.

RULES:
- AnalyzeRequest is the contract between assembly and engines
- Body values replace parameter values field by field
- Any malformed body aborts the whole assembly (MalformedRequestError)
"""

__version__ = "0.1.0"
