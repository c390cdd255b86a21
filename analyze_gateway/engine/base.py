"""Abstract analysis engine interface.

WHY: Assembling a request and executing it are separate concerns. The
HTTP API and CLI only need "something that takes an AnalyzeRequest and
returns a JSON-able result"; where the analysis actually runs is a
deployment decision.

HOW: AnalyzeEngine is an ABC with a single async ``analyze()`` method.
Engines may also be async context managers for connection setup.

To add a new engine:
1. Subclass AnalyzeEngine
2. Implement analyze()
3. Return it from the server's get_engine dependency (or pass it to the CLI)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from analyze_gateway.core.request import AnalyzeRequest


class AnalyzeEngineError(Exception):
    """Raised when the analysis engine rejects or fails a request.

    RULES:
    - status_code mirrors the backend's HTTP status (502 if unknown)
    - message is the backend's error text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Analysis engine error {status_code}: {message}")


class AnalyzeEngine(ABC):
    """Executes a finished AnalyzeRequest."""

    async def __aenter__(self) -> AnalyzeEngine:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        return None

    @abstractmethod
    async def analyze(self, request: AnalyzeRequest) -> Dict[str, Any]:
        """Run the analysis and return the structured result.

        Args:
            request: The assembled request; not modified.

        Returns:
            A JSON-serializable dict (tokens, or detail when explain=True).

        Raises:
            AnalyzeEngineError: If the engine rejects the request.
        """
