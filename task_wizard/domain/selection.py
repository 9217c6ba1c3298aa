from typing import Any, Optional
import math
import re


LEADING_INT = re.compile(r"\s*([+-]?\d{1,9})(?!\d)")


def parse_index(value: Any) -> Optional[int]:
    """Parse a selection index the way the model tends to send it"""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        # Leading integer only, e.g. "2nd" -> 2
        match = LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def valid_selection(value: Any, length: int) -> Optional[int]:
    """Index within [0, length) or None"""

    index = parse_index(value)
    if index is None or index < 0 or index >= length:
        return None
    return index
