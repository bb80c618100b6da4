"""
CPI Depth Estimator: cross-program invocation nesting from log output.

Runtime logs bracket every program invocation:

    Program <id> invoke [1]
    Program <id> invoke [2]
    Program <id> success
    Program <id> failed: <reason>

The estimator walks the lines as a depth counter: an invoke marker opens a
level, a success/failed marker closes one. The counter is floored at zero
because the RPC layer truncates long logs ("Log truncated"), which can leave
more closes than opens in the visible window. Truncation can also hide the
deepest frames, so the result is a lower bound on the true depth.
"""

import re
from typing import Iterable

INVOKE_PATTERN = re.compile(r"\binvoke \[\d+\]")
CLOSE_PATTERN = re.compile(r"(?:^|\s)(?:success\s*$|failed\b)")

# Text written by the program itself, which may contain anything
PROGRAM_OUTPUT_PREFIXES = ("Program log:", "Program data:", "Program return:")


def is_invoke(line: str) -> bool:
    return bool(INVOKE_PATTERN.search(line))


def is_close(line: str) -> bool:
    return bool(CLOSE_PATTERN.search(line))


def estimate_cpi_depth(log_lines: Iterable[str]) -> int:
    """
    Estimate the maximum invocation nesting depth seen in a log.

    Args:
        log_lines: Log messages in emission order

    Returns:
        Maximum depth reached, 0 if no invoke marker was seen
    """
    max_depth = 0
    current_depth = 0

    for line in log_lines:
        if line.startswith(PROGRAM_OUTPUT_PREFIXES):
            continue
        if is_invoke(line):
            current_depth += 1
            max_depth = max(max_depth, current_depth)
        elif is_close(line):
            current_depth = max(0, current_depth - 1)

    return max_depth
