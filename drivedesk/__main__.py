"""
Entry point: `python -m drivedesk` or the `drivedesk` console script.

Checks the configuration before uvicorn starts, so a missing GEMINI_KEY ends
the process with status 1 and a readable message.
"""

import logging
import sys

import uvicorn

from drivedesk.config import get_settings
from drivedesk.main import setup_logging

logger = logging.getLogger("drivedesk")


def run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        settings.validate_required()
    except ValueError as e:
        logger.critical("%s", str(e))
        sys.exit(1)

    uvicorn.run(
        "drivedesk.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
