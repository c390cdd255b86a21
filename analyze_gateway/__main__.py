"""Package entry point for ``python -m analyze_gateway``.

Delegates to the CLI; ``--serve`` starts the HTTP API instead.
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from analyze_gateway.server.app import run_api
        run_api()
    else:
        from analyze_gateway.cli import main
        sys.exit(main())
