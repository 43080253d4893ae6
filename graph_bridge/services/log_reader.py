"""Log file reader.

Parses the text of the latest log file into LogRecords. Lines look like

    2025-08-23 23:37:53.529 - error: nmea.0 (1781) Cannot open /dev/ttyUSB0

Records are returned newest first.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from graph_bridge.core.models.log import LogLevel, LogRecord

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(
    r"^(?P<time>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3})\s+-\s+"
    r"(?P<level>[A-Za-z]+)\s*:\s*(?P<source>\S+)\s+(?P<message>.*)$"
)
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def parse_log_line(line: str) -> LogRecord | None:
    """Parse one log file line.

    Args:
        line: Raw line

    Returns:
        LogRecord, or None if the line is not a log entry
    """
    match = _LINE_RE.match(line.strip())
    if not match:
        return None
    try:
        severity = LogLevel(match["level"].lower())
        ts = round(datetime.strptime(match["time"], _TIME_FORMAT).timestamp() * 1000)
    except ValueError:
        return None
    return LogRecord(
        message=match["message"].strip(),
        ts=ts,
        severity=severity,
        source=match["source"],
    )


def parse_log_text(
    text: str,
    level: LogLevel | str | None = None,
    instance: str | None = None,
    count: int | None = None,
) -> list[LogRecord]:
    """Parse log file text into records, newest first.

    Args:
        text: Full log file text
        level: Only records of exactly this severity
        instance: Only records from exactly this source
        count: Maximum number of records to return

    Returns:
        Matching records, newest first
    """
    if level is not None and not isinstance(level, LogLevel):
        level = LogLevel(level)

    records: list[LogRecord] = []
    skipped = 0
    for line in reversed(text.splitlines()):
        if not line.strip():
            continue
        record = parse_log_line(line)
        if record is None:
            skipped += 1
            continue
        if level is not None and record.severity != level:
            continue
        if instance and record.source != instance:
            continue
        if count and len(records) >= count:
            break
        records.append(record)

    if skipped:
        logger.debug(f"Skipped {skipped} unparsable log line(s)")
    return records
