# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/math_operations.py

"""Fixed-width signed integer addition.

Python integers are unbounded, so ``add`` models the native signed ``int``
of a C/C++ target explicitly: operands must fit in ``bits`` two's-complement
bits, and an out-of-range sum either wraps (the hardware behavior) or raises
``OverflowError`` (a trapping target).

Usage:
    mathops-add 2 3                 # 5
    mathops-add 0x7fffffff 1        # -2147483648 (wrapped)
    mathops-add 2147483647 1 --overflow=raise
    mathops-add -5 -7 --bits=8 --table
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Final, Literal, Sequence

from tabulate import tabulate

from mathops.utils import configure_logger

logger = logging.getLogger(__name__)

INT_BITS: Final[int] = 32
INT_MIN: Final[int] = -(1 << (INT_BITS - 1))
INT_MAX: Final[int] = (1 << (INT_BITS - 1)) - 1

OverflowMode = Literal["wrap", "raise"]
_OVERFLOW_MODES = ("wrap", "raise")


def _check_bits(bits: int) -> None:
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise TypeError(f"bits must be an int, got {type(bits).__name__}")
    if bits <= 0:
        raise ValueError(f"{bits=}")


def _check_operand(name: str, value: int, bits: int) -> None:
    # bool is an int subclass but never a valid operand
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    lo, hi = int_range(bits)
    if not lo <= value <= hi:
        raise ValueError(
            f"{name}={value} does not fit in {bits}-bit signed [{lo}, {hi}]"
        )


def int_range(bits: int = INT_BITS) -> tuple[int, int]:
    """Return the inclusive (min, max) of a ``bits``-wide signed integer."""
    _check_bits(bits)
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def wrap_signed(value: int, bits: int = INT_BITS) -> int:
    """Reduce ``value`` to its two's-complement value in ``bits`` bits."""
    _check_bits(bits)
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def add(
    a: int, b: int, *, bits: int = INT_BITS, overflow: OverflowMode = "wrap"
) -> int:
    """Add two signed integers of the given width.

    Args:
        a: First addend.
        b: Second addend.
        bits: Signed integer width; defaults to the native 32-bit ``int``.
        overflow: ``"wrap"`` to wrap around like two's-complement hardware,
            ``"raise"`` to trap on a sum that does not fit.

    Returns:
        The sum of a and b.

    Raises:
        TypeError: If an operand is not an int.
        ValueError: If an operand does not fit in ``bits`` or an argument
            is invalid.
        OverflowError: If ``overflow="raise"`` and the sum does not fit.
    """
    _check_bits(bits)
    if overflow not in _OVERFLOW_MODES:
        raise ValueError(f"{overflow=}")
    _check_operand("a", a, bits)
    _check_operand("b", b, bits)

    total = a + b
    lo, hi = int_range(bits)
    if lo <= total <= hi:
        return total
    if overflow == "raise":
        raise OverflowError(f"{a} + {b} overflows {bits}-bit signed [{lo}, {hi}]")
    wrapped = wrap_signed(total, bits)
    logger.debug("add(%d, %d) wrapped %d -> %d", a, b, total, wrapped)
    return wrapped


# === CLI ===


def _parse_int(s: str) -> int:
    """argparse type accepting decimal, 0x hex, 0o octal, 0b binary."""
    try:
        return int(s, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: '{s}'") from exc


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for mathops-add."""
    ap = argparse.ArgumentParser(
        description="Add two fixed-width signed integers",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("a", type=_parse_int, help="first addend")
    ap.add_argument("b", type=_parse_int, help="second addend")
    ap.add_argument("--bits", type=int, default=INT_BITS, help="signed width")
    ap.add_argument(
        "--overflow",
        choices=list(_OVERFLOW_MODES),
        default="wrap",
        help="wrap around or raise on overflow",
    )
    ap.add_argument("--table", action="store_true", help="print a result table")
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug", "notset"],
        default="warning",
        help="logging level",
    )
    return ap.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point for mathops-add.

    Returns:
        0 on success, 2 on invalid operands or trapped overflow.
    """
    args = parse_args(argv)
    configure_logger(args.verbosity)
    try:
        result = add(args.a, args.b, bits=args.bits, overflow=args.overflow)
    except (ValueError, TypeError, OverflowError) as exc:
        print(f"[mathops-add]: error: {exc}", file=sys.stderr)
        return 2

    if args.table:
        wrapped = result != args.a + args.b
        rows = [[args.a, args.b, result, "yes" if wrapped else "no"]]
        headers = ["a", "b", f"sum (int{args.bits})", "wrapped"]
        print(tabulate(rows, headers=headers, tablefmt="github"))
    else:
        print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
