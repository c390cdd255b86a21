"""Command-line interface for assembling (and optionally sending) analyze requests.

WHY: When an analyze call behaves unexpectedly it helps to see exactly
which request the gateway builds from a given set of parameters and
body, without starting the server. The same command can then send it
to the backend.

HOW: Positional KEY=VALUE arguments become query parameters (repeat a
key for multiple values). --body reads a file (or "-" for stdin) as the
raw body; --content-type declares its format. The request is assembled
with the same assemble_request() the server uses and printed as JSON.
With --send it is posted through RemoteAnalyzeEngine and the backend's
answer is printed instead.

RULES:
- Output JSON goes to stdout; status and errors go to stderr
- Exit 2 on malformed input, 1 on backend failure, 0 otherwise
- Python 3.9 compatible: no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx

from analyze_gateway.config import ANALYZE_BACKEND_URL, LOG_LEVEL
from analyze_gateway.core.assembler import assemble_request
from analyze_gateway.core.errors import MalformedRequestError
from analyze_gateway.core.request import AnalyzeRequest
from analyze_gateway.engine.base import AnalyzeEngineError
from analyze_gateway.engine.remote import RemoteAnalyzeEngine

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def parse_param_pairs(pairs: List[str]) -> List[Tuple[str, str]]:
    """Turn ["text=hello", "filter=lowercase"] into key/value tuples.

    Raises:
        ValueError: If an argument has no "=".
    """
    result: List[Tuple[str, str]] = []
    for pair in pairs:
        if "=" not in pair:
            raise ValueError("parameter '{}' must look like KEY=VALUE".format(pair))
        key, value = pair.split("=", 1)
        result.append((key, value))
    return result


def _read_body(path: Optional[str]) -> Optional[bytes]:
    if path is None:
        return None
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def describe_request(request: AnalyzeRequest) -> Dict[str, Any]:
    """The request body plus its index, for display."""
    described: Dict[str, Any] = {"index": request.index}
    described.update(request.to_dict())
    return described


async def _send(request: AnalyzeRequest, backend_url: str) -> Dict[str, Any]:
    async with RemoteAnalyzeEngine(base_url=backend_url) as engine:
        return await engine.analyze(request)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="analyze_gateway",
        description="Assemble an analyze request from query parameters and an "
                    "optional body, print it, and optionally send it.",
    )
    parser.add_argument(
        "params",
        nargs="*",
        metavar="KEY=VALUE",
        help="Query parameter, e.g. text=hello filter=lowercase. Repeatable.",
    )
    parser.add_argument(
        "--index",
        default=None,
        help="Index name (as in /{index}/_analyze).",
    )
    parser.add_argument(
        "--body",
        default=None,
        help="Path to a request body file, or '-' for stdin.",
    )
    parser.add_argument(
        "--content-type",
        default=None,
        help="Declared body content type (default: sniffed from the body).",
    )
    parser.add_argument(
        "--send",
        action="store_true",
        help="Send the request to the analysis backend and print the result.",
    )
    parser.add_argument(
        "--backend-url",
        default=ANALYZE_BACKEND_URL,
        help="Analysis backend base URL (default: %(default)s).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``python -m analyze_gateway``.

    argv=None means use sys.argv; explicit argv is for testing.
    """
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = parse_param_pairs(args.params)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        body = _read_body(args.body)
        request = assemble_request(
            params, body=body, content_type=args.content_type, index=args.index
        )
    except OSError as exc:
        _status("Error: cannot read body: {}".format(exc))
        return 2
    except MalformedRequestError as exc:
        _status("Error: {}".format(exc))
        return 2

    if not args.send:
        print(json.dumps(describe_request(request), indent=2, ensure_ascii=False))
        return 0

    _status("Sending analyze request to {}...".format(args.backend_url))
    try:
        result = asyncio.run(_send(request, args.backend_url))
    except AnalyzeEngineError as exc:
        _status("Error: {}".format(exc))
        return 1
    except httpx.HTTPError as exc:
        _status("Error: analysis backend unreachable: {}".format(exc))
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
