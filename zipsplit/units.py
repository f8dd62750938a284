"""Human readable byte sizes ("10Mb", "512k", "2 GB")."""

from __future__ import annotations

KBYTE = 1 << 10

SIZE_TABLE = {
    "": 1,
    "b": 1,
    "k": 1 << 10,
    "kb": 1 << 10,
    "m": 1 << 20,
    "mb": 1 << 20,
    "g": 1 << 30,
    "gb": 1 << 30,
    "t": 1 << 40,
    "tb": 1 << 40,
    "e": 1 << 50,
    "eb": 1 << 50,
}

UNITS = ["b", "Kb", "Mb", "Gb", "Tb", "Eb"]


def parse_size(text: str) -> int:
    """
    Parse a size string into bytes.

    Leading digits are the number; the rest, trimmed and lower-cased, picks the
    multiplier. No digits, or a suffix missing from SIZE_TABLE, yields 0.
    """
    split_point = 0
    for ch in text:
        if not ("0" <= ch <= "9"):
            break
        split_point += 1
    if split_point == 0:
        return 0

    suffix = text[split_point:].strip().lower()
    return int(text[:split_point]) * SIZE_TABLE.get(suffix, 0)


def format_size(n: int) -> str:
    value = float(n)
    i = 0
    while value > KBYTE and i < len(UNITS) - 1:
        value /= KBYTE
        i += 1
    return f"{value:.2f}{UNITS[i]}"
