"""
=============================================================================
COMMAND-LINE INTERFACE
=============================================================================

Runs one request through the handler and prints what a client would get.
Handy for checking how a document root will be served without starting
a server.

    python -m staticserve --root ./public /
    python -m staticserve --root ./public /docs/readme.txt --body
    STATICSERVE_DOC_ROOT=./public python -m staticserve "/my%20file.txt"

Exit status is 0 for a 2xx reply, 1 otherwise.

=============================================================================
"""

import argparse
import os
import sys

from . import __version__
from .config import HandlerConfig, DEFAULT_WINDOW_SIZE, configure_logging
from .http.request import Request
from .handlers.request_handler import RequestHandler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staticserve",
        description="Resolve a request path against a document root and show the reply",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserve --root ./public /                 # Listing of the root
  python -m staticserve --root ./public /index.html       # Headers for a file
  python -m staticserve --root ./public /a.txt --body     # Include the body
        """
    )

    parser.add_argument(
        "uri",
        help="Request target, percent-encoded as a client would send it"
    )

    parser.add_argument(
        "--root", "-r",
        default=os.getenv("STATICSERVE_DOC_ROOT", "."),
        help="Document root (default: $STATICSERVE_DOC_ROOT or current directory)"
    )

    parser.add_argument(
        "--window-size",
        type=int,
        default=DEFAULT_WINDOW_SIZE,
        help=f"Bytes copied into the reply before streaming (default: {DEFAULT_WINDOW_SIZE})"
    )

    parser.add_argument(
        "--body", "-b",
        action="store_true",
        help="Write the full body to stdout after the headers"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserve {__version__}"
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = HandlerConfig.for_root(
        args.root,
        window_size=args.window_size,
        log_level=args.log_level,
    )
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    handler = RequestHandler(config)

    out = sys.stdout.buffer
    with handler.handle(Request(args.uri)) as reply:
        out.write(f"{int(reply.status)} {reply.status.phrase}\r\n".encode("ascii"))
        for name, value in reply.headers:
            out.write(f"{name}: {value}\r\n".encode("latin-1"))
        out.write(b"\r\n")

        if args.body:
            for chunk in reply.body_chunks():
                out.write(chunk)
        out.flush()

        return 0 if reply.status.is_success else 1


if __name__ == "__main__":
    sys.exit(main())
