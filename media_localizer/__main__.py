"""Package entry point for ``python -m media_localizer``.

HOW: ``serve`` as the first argument starts the gateway API server;
anything else is handed to the CLI's main() function.
"""

import sys

if __name__ == "__main__":
    if sys.argv[1:2] == ["serve"]:
        from media_localizer.server.app import run_api
        run_api()
    else:
        from media_localizer.cli import main
        main()
