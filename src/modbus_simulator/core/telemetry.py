"""
Telemetry Sink
==============

Append-only CSV record of computed channel values.

Each call to ``record`` appends one line::

    2026-01-11 21:42:00,300,200,15

i.e. timestamp, one column per channel, then the global step. The file is
opened and closed on every write, so no handle is held between ticks.
Write failures (permissions, file locked by a spreadsheet) are logged and
never reach the caller.

Author: Guilherme F. G. Santos
Date: October 2026
License: MIT
"""

import csv
import logging
from datetime import datetime
from typing import Sequence, Union

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Number = Union[int, float]


def format_decimal(value: Number) -> str:
    """Locale-independent decimal text; integral floats lose their '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class TelemetrySink:
    """
    CSV telemetry recorder.

    Args:
        path: Destination file (created on first write)
        enabled: When False, ``record`` performs no I/O at all
    """

    def __init__(self, path: str, enabled: bool = True):
        self.path = path
        self.enabled = enabled

    def record(
        self, timestamp: datetime, values: Sequence[Number], step: Number
    ) -> bool:
        """
        Append one telemetry line.

        Args:
            timestamp: Wall-clock time of the tick
            values: Channel values in configured order
            step: Global step of the tick

        Returns:
            True if a line was written, False if skipped or failed
        """
        if not self.enabled or not values:
            return False

        row = [timestamp.strftime(TIMESTAMP_FORMAT)]
        row.extend(format_decimal(v) for v in values)
        row.append(format_decimal(step))

        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerow(row)
        except OSError as e:
            logger.error(f"Failed to write telemetry to {self.path}: {e}")
            return False

        return True
