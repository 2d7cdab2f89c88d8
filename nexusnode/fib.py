"""Fibonacci guest program: reads its inputs from stdin and prints the result."""

from __future__ import annotations

import re
import sys
from typing import Iterable, Optional

_U32_MASK = 0xFFFFFFFF
_U32_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_u32(text: str) -> int:
    value = text.strip()
    if not _U32_PATTERN.fullmatch(value):
        raise ValueError(f"invalid digit found in string: {value!r}")
    number = int(value)
    if number > _U32_MASK:
        raise ValueError("number too large to fit in target type")
    return number


def parse_inputs(lines: Iterable[str]) -> tuple[int, int, int]:
    """Read (n, init_a, init_b); missing or malformed init values default to 1."""
    iterator = iter(lines)
    try:
        first = next(iterator)
    except StopIteration:
        raise ValueError("No first input provided") from None
    try:
        n = _parse_u32(first)
    except ValueError as exc:
        raise ValueError(f"Failed to parse first input as u32: {exc}") from exc

    def optional(default: int = 1) -> int:
        line = next(iterator, None)
        if line is None:
            return default
        try:
            return _parse_u32(line)
        except ValueError:
            return default

    init_a = optional()
    init_b = optional()
    return n, init_a, init_b


def fibonacci(n: int, init_a: int, init_b: int) -> int:
    """Advance the sequence ``n`` steps from (init_a, init_b) with 32-bit wrap-around."""
    prev, curr = init_a & _U32_MASK, init_b & _U32_MASK
    for _ in range(n):
        prev, curr = curr, (prev + curr) & _U32_MASK
    return curr


def main(argv: Optional[list[str]] = None) -> int:
    """Read inputs from stdin and print the resulting value."""
    try:
        n, init_a, init_b = parse_inputs(sys.stdin)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(fibonacci(n, init_a, init_b))
    return 0