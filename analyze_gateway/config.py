"""Configuration constants and .env loading.

WHY: The gateway needs a handful of deployment knobs (backend URL,
timeouts, default attributes, strict field matching, listen address).
Keeping them as plain module-level constants makes them easy to find
and override without touching request-handling logic.

HOW: python-dotenv loads the .env file on import. Each constant reads
its environment variable once, with a sensible default.

RULES:
- Every value can be overridden via environment variables
- DEFAULT_ATTRIBUTES is a tuple (immutable); requests copy it into a list
- Boolean flags accept "true"/"1"/"yes"/"on" (case-insensitive)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the server is started from)
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes", "on")


def _env_list(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


# ---------------------------------------------------------------------------
# Request defaults
# ---------------------------------------------------------------------------

DEFAULT_ATTRIBUTES: tuple[str, ...] = _env_list("ANALYZE_DEFAULT_ATTRIBUTES")
"""Token attributes reported by explain output when the caller names none."""

STRICT_PARSING = _env_flag("ANALYZE_STRICT_PARSING")
"""Reject deprecated field spellings (e.g. camelCase) instead of warning."""

# ---------------------------------------------------------------------------
# Analysis backend
# ---------------------------------------------------------------------------

ANALYZE_BACKEND_URL = os.getenv("ANALYZE_BACKEND_URL", "http://localhost:9200")
ANALYZE_BACKEND_TIMEOUT = float(os.getenv("ANALYZE_BACKEND_TIMEOUT", "30"))

# ---------------------------------------------------------------------------
# HTTP server / logging
# ---------------------------------------------------------------------------

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
