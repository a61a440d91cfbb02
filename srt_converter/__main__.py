"""Package entry point for ``python -m srt_converter``.

WHY: Users run the converter as ``python -m srt_converter transcript.txt``
for CLI mode, or ``python -m srt_converter --serve`` to start the HTTP
API. Python's ``-m`` flag looks for ``__main__.py`` inside the package
and executes it.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI server. Otherwise, delegates to the CLI's main() function.
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from srt_converter.server.app import run_api
        run_api()
    else:
        from srt_converter.cli import main
        main()
