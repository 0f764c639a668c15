import logging
import sys
from typing import Optional, TextIO


logger = logging.getLogger("repoprep")

_HANDLER_NAME = "repoprep-cli"


def configure_logging(debug: bool, stream: Optional[TextIO] = None):
    """
    Send repoprep log records to ``stream`` (stdout by default).

    Calling it again replaces the handler installed by a previous call, so the
    level and stream can be switched within one process.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))

    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(handler)
