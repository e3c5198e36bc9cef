"""Time helpers."""

import time


def get_timestamp_ms() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)
