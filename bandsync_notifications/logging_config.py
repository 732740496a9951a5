"""Logging setup.

The notifier uses the shared InstruktAI logging standard
(`instrukt_ai_logging`); modules log through ``get_logger(__name__)`` with
structured key/value fields.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging

APP_NAME = "bandsync_notifications"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure notifier logging.

    Args:
        level: Optional override for `BANDSYNC_NOTIFICATIONS_LOG_LEVEL`.
    """
    if level:
        os.environ["BANDSYNC_NOTIFICATIONS_LOG_LEVEL"] = level

    configure_logging(APP_NAME)
