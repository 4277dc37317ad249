import secrets
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Opaque record id: 16 random bytes as 32 hex characters."""
    return secrets.token_hex(16)


def generate_request_id() -> str:
    """``req_<millis>_<9 base36 chars>`` as returned by the refine endpoint."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def utc_timestamp(after: Optional[str] = None) -> str:
    """Current UTC time as ISO-8601 with millisecond precision.

    When ``after`` is given the result is strictly later than it, even if
    the clock has not advanced past it yet.
    """
    now = datetime.now(timezone.utc)
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    if after:
        previous = parse_timestamp(after)
        if now <= previous:
            now = previous.replace(microsecond=previous.microsecond // 1000 * 1000) + timedelta(milliseconds=1)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
