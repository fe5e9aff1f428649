"""
Logging setup shared by the command line tool and the MCP server.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, stdout: bool = True) -> None:
    """
    Install the root handlers (no file handlers).

    Records at ``level`` and above go to stdout, errors always go to stderr.
    With ``stdout=False`` everything goes to stderr, which keeps stdout free
    for command output and the stdio transport.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if stdout:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(formatter)
        stdout_handler.setLevel(level)
        # Errors are left to the stderr handler
        stdout_handler.addFilter(lambda record: record.levelno < logging.ERROR)
        root_logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.ERROR if stdout else level)

    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(level)
