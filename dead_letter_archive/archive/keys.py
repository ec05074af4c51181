"""
Archive key derivation.

Keys embed a fresh uuid4 on every call: workflows can emit several messages
that all fail, and a redriven batch must not overwrite earlier objects.
"""

import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable

from dead_letter_archive.core.models import ArchivalKey
from dead_letter_archive.core.models.archival_record import UNKNOWN_EXECUTION
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)

DATE_PARTITION = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def generate_token() -> str:
    """Collision-resistant random token for one archive object."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_event_time(value: Any) -> datetime | None:
    """
    Parse an event timestamp as a UTC datetime.

    Accepts ISO 8601 strings (a trailing ``Z`` included) and epoch
    milliseconds. Naive timestamps are taken to be UTC.

    Returns:
        The timestamp, or None if it cannot be parsed
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def archive_date(time_value: Any, now: Callable[[], datetime] = utc_now) -> date:
    """
    UTC calendar date a record is filed under.

    Args:
        time_value: The record's resolved time, if any
        now: Clock used when the record has no usable time

    Returns:
        Date of the record's time, or of the processing time
    """
    parsed = parse_event_time(time_value)
    if parsed is None:
        if time_value not in (None, ""):
            logger.warning(
                f"Unparseable record time {time_value!r}, filing under processing date",
                extra={"record_time": str(time_value)},
            )
        parsed = now()
    return parsed.astimezone(timezone.utc).date()


def build_archival_key(
    prefix: str,
    time_value: Any = None,
    execution_arn: str | None = None,
    token_factory: Callable[[], str] = generate_token,
    now: Callable[[], datetime] = utc_now,
) -> ArchivalKey:
    """
    Build the key for one archive object.

    Args:
        prefix: Archive prefix (``<stack>/dead-letter-archive/sqs``)
        time_value: The record's resolved time
        execution_arn: The record's execution ARN
        token_factory: Source of uniqueness tokens
        now: Clock used when the record has no time

    Returns:
        ArchivalKey; ``str(key)`` is the object key
    """
    return ArchivalKey(
        prefix=prefix,
        archive_date=archive_date(time_value, now=now),
        execution_name=execution_arn or UNKNOWN_EXECUTION,
        token=token_factory(),
    )


def is_date_partitioned(key: str, prefix: str) -> bool:
    """True if a key sits under a ``<prefix>/YYYY-MM-DD/`` partition."""
    remainder = key[len(prefix):].lstrip("/") if key.startswith(prefix) else key
    first_segment, _, rest = remainder.partition("/")
    return bool(rest) and bool(DATE_PARTITION.match(first_segment))
