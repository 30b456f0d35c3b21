"""Checkpoint interval and progress percentage arithmetic."""

import math


def checkpoint_interval(total_records: int, *, every_rows: int, every_percent: int) -> int:
    """Return the number of rows between progress checkpoints.

    The interval is the coarser of ``every_rows`` and ``every_percent`` of
    the total, so small exports are not flooded with writes and large
    exports still report at a steady cadence.

    Args:
        total_records: Expected number of rows.
        every_rows: Minimum rows between checkpoints.
        every_percent: Minimum share of the total between checkpoints.

    Returns:
        A positive row interval.
    """
    by_share = math.ceil(total_records * every_percent / 100) if total_records > 0 else 0
    return max(every_rows, by_share, 1)


def progress_percent(processed_records: int, total_records: int) -> int:
    """Progress for an in-flight job, clamped to [0, 99].

    100 is reserved for the completed state.
    """
    if total_records <= 0:
        return 0
    percent = math.floor(processed_records * 100 / total_records)
    return max(0, min(percent, 99))
