"""FastAPI application exposing the ``_analyze`` endpoints.

WHY: Clients (search UIs, mapping tools, curl) call ``_analyze`` with
query parameters, a body, or both. This app is the thin HTTP shell that
hands the raw inputs to the assembler and the finished request to the
analysis engine.

HOW: Four routes (GET/POST, with and without an index path segment)
share one handler. The raw query string is read with repeated keys
preserved; the body is read as bytes and its Content-Type header passed
along for content-type resolution. The engine is a FastAPI dependency
so tests and deployments can swap it.

RULES:
- MalformedRequestError → 400 with ErrorResponse
- AnalyzeEngineError → the backend's status code
- Transport failures talking to the backend → 502
- A ``source`` query parameter stands in for an empty body
  (``source_content_type`` declares its format)
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request

from analyze_gateway import __version__
from analyze_gateway.config import API_HOST, API_PORT, LOG_LEVEL
from analyze_gateway.core.assembler import assemble_request
from analyze_gateway.core.errors import MalformedRequestError
from analyze_gateway.core.params import RequestParams
from analyze_gateway.engine.base import AnalyzeEngine, AnalyzeEngineError
from analyze_gateway.engine.remote import RemoteAnalyzeEngine
from analyze_gateway.server.models import AnalyzeBody, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Analyze Gateway API",
    description=(
        "Front-end for text analysis. Combines URL parameters and an optional "
        "JSON/YAML body into one analyze request (tokenizer, token filters and "
        "char filters by name or inline settings) and forwards it to the "
        "analysis backend."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


async def get_engine() -> AsyncIterator[AnalyzeEngine]:
    """Yield a connected engine for the duration of one request."""
    async with RemoteAnalyzeEngine() as engine:
        yield engine


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


_ANALYZE_DOC: Dict[str, Any] = {
    "responses": {
        400: {"model": ErrorResponse, "description": "Malformed parameters or body"},
        502: {"model": ErrorResponse, "description": "Analysis backend unreachable"},
    },
    "openapi_extra": {
        "requestBody": {
            "required": False,
            "content": {
                "application/json": {"schema": AnalyzeBody.model_json_schema()},
                "text/plain": {"schema": {"type": "string"}},
            },
        }
    },
}


async def _analyze(
    request: Request,
    engine: AnalyzeEngine,
    index: Optional[str] = None,
) -> Dict[str, Any]:
    params = RequestParams(request.query_params.multi_items())
    body = await request.body()
    content_type = request.headers.get("content-type")

    if not body and "source" in params:
        body = (params.param("source") or "").encode("utf-8")
        content_type = params.param("source_content_type")

    try:
        analyze_request = assemble_request(
            params, body=body, content_type=content_type, index=index
        )
    except MalformedRequestError as exc:
        logger.info("Rejected analyze request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        return await engine.analyze(analyze_request)
    except AnalyzeEngineError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    except httpx.HTTPError as exc:
        logger.exception("Analysis backend request failed")
        raise HTTPException(
            status_code=502,
            detail="Analysis backend unavailable: {}".format(exc),
        )


# ---------------------------------------------------------------------------
# Endpoints: Analyze
# ---------------------------------------------------------------------------


@app.api_route(
    "/_analyze",
    methods=["GET", "POST"],
    tags=["analyze"],
    summary="Analyze text",
    description=(
        "Analyze text with a named analyzer, a field's analyzer, or an ad-hoc "
        "chain of char filters, tokenizer and token filters. Parameters: text, "
        "analyzer, field, tokenizer, filter, char_filter, explain, attributes. "
        "A JSON/YAML body overrides parameters field by field; a plain-text "
        "body is analyzed as the text when no text parameter is given."
    ),
    **_ANALYZE_DOC,
)
async def analyze(
    request: Request,
    engine: AnalyzeEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return await _analyze(request, engine)


@app.api_route(
    "/{index}/_analyze",
    methods=["GET", "POST"],
    tags=["analyze"],
    summary="Analyze text in the scope of an index",
    description=(
        "Same as /_analyze, but analyzers, fields and filters are resolved "
        "against the given index."
    ),
    **_ANALYZE_DOC,
)
async def analyze_index(
    index: str,
    request: Request,
    engine: AnalyzeEngine = Depends(get_engine),
) -> Dict[str, Any]:
    return await _analyze(request, engine, index=index)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the analyze-gateway-api console script."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host=API_HOST, port=API_PORT)
