"""Total orders over tree keys.

A comparison is a three-way function `compare(a, b)` returning a negative
number when `a` sorts before `b`, zero when they are equivalent, and a
positive number when `a` sorts after `b` (the same contract as the
`cmp` functions accepted by `functools.cmp_to_key`).
"""
from typing import Any, Callable


Compare = Callable[[Any, Any], int]


def natural_order(a: Any, b: Any) -> int:
    """Compare two keys with their own `<` and `>` operators."""
    return (a > b) - (a < b)


def reverse_order(compare: Compare = natural_order) -> Compare:
    """Return a comparison that sorts keys opposite to `compare`."""

    def reversed_compare(a: Any, b: Any) -> int:
        return compare(b, a)

    return reversed_compare
