"""Core request model, field matching, parameter binding and body parsing.

WHY: The core package holds the part of the gateway that must behave
identically no matter how the call arrived (HTTP, CLI, tests): turning
query parameters and a body into one AnalyzeRequest.

HOW: request.py defines the model and the FieldSpec union, params.py
binds query parameters, xcontent.py turns body bytes into a token
cursor, body.py walks that cursor, assembler.py runs them in order.

RULES:
- No I/O beyond the bytes and parameters handed in
- Nothing here resolves tokenizer/filter names to behaviour
"""

from analyze_gateway.core.assembler import assemble_request
from analyze_gateway.core.errors import MalformedRequestError
from analyze_gateway.core.request import (
    AnalyzeRequest,
    FieldSpec,
    NameSpec,
    SettingsSpec,
)

__all__ = [
    "AnalyzeRequest",
    "FieldSpec",
    "MalformedRequestError",
    "NameSpec",
    "SettingsSpec",
    "assemble_request",
]
