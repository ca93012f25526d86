"""
Exact integer square roots.

Responsibility: floor(sqrt(n)) for 32-bit and 64-bit inputs, nothing else.

The float estimate from math.sqrt is only a starting point. For inputs above
2**52 a double cannot represent n exactly and the truncated root may be off
by one in either direction, so the estimate is always corrected until

    r*r <= n < (r+1)*(r+1)

holds.
"""

import math
import numbers

from numba import njit

from .errors import InvalidArgumentError

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1


def _floor_sqrt(n):
    r = int(math.sqrt(n))
    while r * r > n:
        r -= 1
    while (r + 1) * (r + 1) <= n:
        r += 1
    return r


# Same correction compiled for the generator's inner loop.
# Only valid while (r+1)**2 fits in int64, i.e. n < 2**62.
isqrt_kernel = njit(_floor_sqrt)


def _check(n, upper: int, name: str) -> int:
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidArgumentError(f"{name} expects an integer, got {n!r}")
    n = int(n)
    if n < 0 or n > upper:
        raise InvalidArgumentError(f"{name}: {n} is out of range for [ 0 .. {upper} ]")
    return n


def isqrt32(n: int) -> int:
    """
    Integer square root of a non-negative 32-bit signed value.

    Parameters
    ----------
    n : int
        Value in [0, 2**31 - 1].

    Returns
    -------
    int
        The largest r such that r*r <= n.
    """
    return _floor_sqrt(_check(n, INT32_MAX, 'isqrt32'))


def isqrt64(n: int) -> int:
    """
    Integer square root of a non-negative 64-bit signed value.

    Parameters
    ----------
    n : int
        Value in [0, 2**63 - 1].

    Returns
    -------
    int
        The largest r such that r*r <= n.
    """
    return _floor_sqrt(_check(n, INT64_MAX, 'isqrt64'))
