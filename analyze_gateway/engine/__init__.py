"""Analysis engines that execute an assembled AnalyzeRequest.

WHY: The gateway only builds requests. Engines run them, locally or by
forwarding to a remote analysis backend.

RULES:
- All engines subclass AnalyzeEngine
- Engines never modify the request they are given
"""

from analyze_gateway.engine.base import AnalyzeEngine, AnalyzeEngineError
from analyze_gateway.engine.remote import RemoteAnalyzeEngine

__all__ = ["AnalyzeEngine", "AnalyzeEngineError", "RemoteAnalyzeEngine"]
