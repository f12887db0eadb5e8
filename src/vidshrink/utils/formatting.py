"""Pure presentation helpers for sizes and compression ratios."""

from __future__ import annotations

_UNITS: tuple[str, ...] = ("Bytes", "KB", "MB", "GB")
_STEP: int = 1024


def format_size(num_bytes: int) -> str:
    """Render a byte count with the largest unit that keeps it >= 1.

    ``0`` renders as ``"0 Bytes"`` and counts below 1024 stay integral.
    Larger counts use two decimals; anything past GB stays in GB.

    Raises
    ------
    ValueError
        When *num_bytes* is negative.
    """
    if num_bytes < 0:
        raise ValueError(f"Size cannot be negative: {num_bytes}")
    if num_bytes < _STEP:
        return f"{num_bytes} Bytes"

    value = float(num_bytes)
    index = 0
    # Compare the rounded value so 1023.999 KB is shown as 1.00 MB.
    while round(value, 2) >= _STEP and index < len(_UNITS) - 1:
        value /= _STEP
        index += 1
    return f"{value:.2f} {_UNITS[index]}"


def compression_ratio(original: int | None, compressed: int | None) -> str:
    """Return ``"<x.y>% smaller"``, or ``""`` when either size is unset."""
    if not original or not compressed:
        return ""
    ratio = (original - compressed) / original * 100
    return f"{ratio:.1f}% smaller"

