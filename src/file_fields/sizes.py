"""Conversion of human size expressions ("2M", "500K") into bytes."""

import re
from typing import Union

from file_fields.errors import InvalidSizeFormatError, InvalidSizeTypeError

# Decimal multipliers, not 1024-based
KILO = 1000
MEGA = 1000 * 1000

_UNITS = {
    "": 1,
    "k": KILO,
    "kb": KILO,
    "m": MEGA,
    "mb": MEGA,
}

_SIZE_PATTERN = re.compile(r"^(?P<number>\d+) ?(?P<unit>[a-z]*)$")


def parse_size(size: Union[int, str]) -> int:
    """Convert a size expression to a byte count.

    Args:
        size: An integer byte count, a digit string, or a number suffixed
            with ``k``/``kb`` or ``m``/``mb`` (case-insensitive)

    Returns:
        The size in bytes

    Raises:
        InvalidSizeTypeError: If the size is neither an integer nor a string
        InvalidSizeFormatError: If the string uses any other form
    """
    if isinstance(size, bool):
        raise InvalidSizeTypeError("File sizes must either be an integer or a string")
    if isinstance(size, int):
        return size
    if not isinstance(size, str):
        raise InvalidSizeTypeError("File sizes must either be an integer or a string")

    match = _SIZE_PATTERN.match(size.strip().lower())
    if not match or match.group("unit") not in _UNITS:
        raise InvalidSizeFormatError(f"Unsupported file size format: {size!r}")

    return int(match.group("number")) * _UNITS[match.group("unit")]
