"""Command-line entry point for getbearertoken."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .config import load_parameters, parse_flags
from .errors import ExitCode, GetBearerTokenError
from .token_service import resolve, write_token_file

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"
SDK_LOGGERS = ("msal", "azure")


class _MaxLevelFilter(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def configure_logging(verbose: bool = False) -> None:
    """Send progress to stdout and warnings or errors to stderr."""

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_getbearertoken", False):
            root.removeHandler(handler)
    for handler in (stdout_handler, stderr_handler):
        handler._getbearertoken = True
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tool and return the process exit code."""

    if argv is None:
        argv = sys.argv[1:]
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "getbearertoken"

    configure_logging()
    try:
        args = parse_flags(argv, prog=prog)

        if args.version:
            print(__version__)
            return ExitCode.SUCCESS

        params = load_parameters(args)
        if params.verbose:
            configure_logging(verbose=True)
        logger.debug("Invocation parameters: %r", params)

        token = resolve(params)
        write_token_file(params.token_file_output, token)
    except GetBearerTokenError as exc:
        logger.error("%s", exc)
        return exc.exit_code

    logger.info("Token successfully written to %s", params.token_file_output)
    return ExitCode.SUCCESS


def run() -> None:
    sys.exit(int(main()))


if __name__ == "__main__":
    run()
