"""Pydantic models for the HTTP API.

WHY: FastAPI needs typed schemas for error/health responses and, for
the OpenAPI docs, a description of the analyze body. The body itself is
NOT validated through pydantic: it is parsed token by token by
core.body so that error messages name the exact offending field.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- AnalyzeBody is documentation only; never used to parse requests
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class AnalyzeBody(BaseModel):
    """Structured body accepted by the analyze endpoints (JSON or YAML)."""

    text: Optional[Union[str, List[str]]] = Field(
        default=None,
        description="Text to analyze; a string or an array of strings.",
    )
    analyzer: Optional[str] = Field(
        default=None,
        description="Name of a registered analyzer.",
    )
    field: Optional[str] = Field(
        default=None,
        description="Mapped field whose analyzer should be used.",
    )
    tokenizer: Optional[Union[str, Dict[str, Any]]] = Field(
        default=None,
        description="Tokenizer name, or inline tokenizer settings.",
    )
    filter: Optional[List[Union[str, Dict[str, Any]]]] = Field(
        default=None,
        description="Token filters (names or inline settings), applied in order.",
    )
    char_filter: Optional[List[Union[str, Dict[str, Any]]]] = Field(
        default=None,
        description="Character filters (names or inline settings), applied in order.",
    )
    explain: Optional[bool] = Field(
        default=None,
        description="Return per-stage token detail.",
    )
    attributes: Optional[List[str]] = Field(
        default=None,
        description="Token attributes to include when explain is true.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "text": ["Quick <b>brown</b> foxes"],
                "tokenizer": "standard",
                "filter": ["lowercase", {"type": "stop", "stopwords": ["a", "the"]}],
                "char_filter": ["html_strip"],
                "explain": False,
            }
        ]
    }}


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
