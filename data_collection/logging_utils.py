"""
data_collection/logging_utils.py

JSON log lines for the parsing, HTTP, scraping and validation services.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Log ``event`` plus ``fields`` as one JSON object with sorted keys.

    Values json cannot encode (dates, enums, exceptions) are written with
    ``str``. Non-ASCII text such as Turkish column names is kept as is.
    """

    record = dict(fields, event=event)
    logger.log(level, json.dumps(record, default=str, ensure_ascii=False, sort_keys=True))
