"""Engine that forwards analyze requests to a remote backend over HTTP.

WHY: The gateway does not tokenize anything itself. In production it
sits in front of a search/analysis cluster that exposes the standard
``_analyze`` endpoint; this engine is the bridge to it.

HOW: Wraps httpx.AsyncClient. analyze() renders the request with
AnalyzeRequest.to_dict(), validates the payload against
analyze_request.schema.json, and POSTs it to ``/{index}/_analyze`` (or
``/_analyze`` without an index). The backend's JSON answer is returned
unchanged.

RULES:
- Use as: async with RemoteAnalyzeEngine() as engine: ...
- base_url / timeout default to ANALYZE_BACKEND_URL / ANALYZE_BACKEND_TIMEOUT
- Outgoing payloads are schema-validated before any network call
- Non-2xx responses raise AnalyzeEngineError with the backend status
- Transport failures propagate as httpx.HTTPError
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import jsonschema

from analyze_gateway.config import ANALYZE_BACKEND_TIMEOUT, ANALYZE_BACKEND_URL
from analyze_gateway.core.request import AnalyzeRequest
from analyze_gateway.engine.base import AnalyzeEngine, AnalyzeEngineError

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent / "analyze_request.schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def analyze_path(index: Optional[str]) -> str:
    """Backend path for an analyze call, with the index URL-escaped."""
    if index:
        return "/{}/_analyze".format(quote(index, safe=""))
    return "/_analyze"


def build_payload(request: AnalyzeRequest) -> Dict[str, Any]:
    """Render and validate the JSON body sent to the backend.

    Raises:
        jsonschema.ValidationError: If the rendered body is not a valid
            analyze request (indicates a bug in to_dict()).
    """
    payload = request.to_dict()
    jsonschema.validate(instance=payload, schema=_get_schema())
    return payload


class RemoteAnalyzeEngine(AnalyzeEngine):
    """Async client for a remote ``_analyze`` endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = (base_url or ANALYZE_BACKEND_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else ANALYZE_BACKEND_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> RemoteAnalyzeEngine:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "RemoteAnalyzeEngine must be used as an async context manager: "
                "async with RemoteAnalyzeEngine() as engine: ..."
            )
        return self._client

    async def analyze(self, request: AnalyzeRequest) -> Dict[str, Any]:
        client = self._ensure_client()
        payload = build_payload(request)
        path = analyze_path(request.index)

        logger.info("Forwarding analyze request to %s%s", self._base_url, path)
        resp = await client.post(path, json=payload)

        if resp.status_code >= 400:
            logger.warning(
                "Analysis backend returned %d for %s", resp.status_code, path
            )
            raise AnalyzeEngineError(resp.status_code, _error_message(resp))
        return resp.json()


def _error_message(resp: httpx.Response) -> str:
    """Extract a readable reason from a backend error response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("reason"):
        return str(error["reason"])
    if isinstance(error, str):
        return error
    return resp.text
