"""Process-wide logging setup."""

import logging

from pocketbook.api.middleware.logging import JSONLogFormatter
from pocketbook.config import Settings

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install a single stream handler on the root logger.

    Uses the JSON formatter when settings.log_json is set, plain text
    otherwise. Calling it again replaces the previous handler.
    """
    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())
