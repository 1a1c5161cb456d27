# Money Module
# Exact decimal arithmetic for every calculator in the financial plan
#
# Components:
# - context.py: DecimalContext, fixed once at process start
# - arithmetic.py: add/sub/mul/div/pct, rounding, input validation
# - formatting.py: German EUR formatting and parsing

from .context import DecimalContext, DEFAULT_CONTEXT, CENT, ZERO, HUNDRED
from .arithmetic import (
    to_decimal,
    require_non_negative,
    require_percentage,
    add,
    sub,
    mul,
    div,
    pct,
    round2,
    sum_amounts,
)
from .formatting import format_eur, parse_eur, format_percent

__all__ = [
    # Context
    "DecimalContext",
    "DEFAULT_CONTEXT",
    "CENT",
    "ZERO",
    "HUNDRED",
    # Arithmetic
    "to_decimal",
    "require_non_negative",
    "require_percentage",
    "add",
    "sub",
    "mul",
    "div",
    "pct",
    "round2",
    "sum_amounts",
    # Formatting
    "format_eur",
    "parse_eur",
    "format_percent",
]
