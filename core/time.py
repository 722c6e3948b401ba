# PATH: core/time.py
"""
Time utilities for swaplens.
"""

import time


def now_ms() -> int:
    """Get current Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


def elapsed_ms(start_ms: int) -> int:
    """Milliseconds since start_ms."""
    return now_ms() - start_ms
