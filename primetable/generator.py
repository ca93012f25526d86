"""
Prime generation by trial division.

Responsibility: produce the first `count` primes. No lookups, no I/O.

Every odd candidate r > 2 is divided only by the primes already found that
do not exceed isqrt(r). A number with no prime divisor <= its square root is
prime, so the table grows without gaps:

    ps[0] = 2, r = 1
    r += 2; reject r if any ps[i] <= isqrt(r) divides it; else append r

The inner loop is compiled with numba and fills the table one block at a
time. Between blocks the newly found primes are handed to the optional
handler, in ascending order, before the next block is computed.
"""

import numbers

import numpy as np
from numba import njit

from .errors import InvalidArgumentError
from .intmath import isqrt_kernel

# Primes in [2, 2**31 - 1]; the last one is 2**31 - 1 itself.
NUMBER_OF_PRIMES_UPTO_INT32_MAX = 105097565

# Primes computed per kernel call when a handler is given; also the
# largest delay between finding a prime and handing it over.
DEFAULT_BLOCK_SIZE = 1 << 12

_SUPPORTED_DTYPES = (np.dtype(np.int32), np.dtype(np.int64))


@njit
def _fill(ps, px, stop, r):
    """Fill ps[px:stop] with the primes following candidate r; return the last candidate."""
    while px < stop:
        r += 2
        s = isqrt_kernel(r)
        composite = False
        i = 0
        while i < px and ps[i] <= s:
            if r % ps[i] == 0:
                composite = True
                break
            i += 1
        if not composite:
            ps[px] = r
            px += 1
    return r


def _check_block_size(block_size) -> int:
    if isinstance(block_size, bool) or not isinstance(block_size, numbers.Integral) or block_size < 1:
        raise InvalidArgumentError(f"block_size must be a positive integer, got {block_size!r}")
    return int(block_size)


def _check_count(count, dtype: np.dtype) -> int:
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise InvalidArgumentError(f"count must be an integer, got {count!r}")
    count = int(count)
    if count < 0:
        raise InvalidArgumentError(f"count must be non-negative, got {count}")
    if dtype == np.int32 and count > NUMBER_OF_PRIMES_UPTO_INT32_MAX:
        raise InvalidArgumentError(
            f"count must not exceed {NUMBER_OF_PRIMES_UPTO_INT32_MAX}, "
            f"primes beyond that do not fit into int32"
        )
    return count


def generate(count: int, handler=None, dtype=np.int32,
             block_size: int = DEFAULT_BLOCK_SIZE) -> np.ndarray:
    """
    Generate the first `count` primes, starting from 2.

    Parameters
    ----------
    count : int
        How many primes to generate. At most NUMBER_OF_PRIMES_UPTO_INT32_MAX
        for the int32 variant.
    handler : callable, optional
        Called once per prime as a Python int, in ascending order, on the
        calling thread. Useful for streaming primes into a file. Primes are
        computed `block_size` at a time and handed over after each block, so
        the handler runs at most one block behind generation. Raising from
        the handler propagates the exception; no further block is computed.
    dtype : np.int32 or np.int64
        Width of the candidate and table values.
    block_size : int
        Number of primes computed between handler hand-overs. Ignored when
        there is no handler.

    Returns
    -------
    np.ndarray
        Array of `count` primes, ascending.
    """
    try:
        dtype = np.dtype(dtype)
    except TypeError as exc:
        raise InvalidArgumentError(f"unsupported dtype {dtype!r}") from exc
    if dtype not in _SUPPORTED_DTYPES:
        raise InvalidArgumentError(f"dtype must be int32 or int64, got {dtype}")
    block_size = _check_block_size(block_size)
    count = _check_count(count, dtype)

    ps = np.zeros(count, dtype=dtype)
    if count == 0:
        return ps

    ps[0] = 2
    if handler is not None:
        handler(2)

    # Without a handler there is nobody to hand blocks to.
    step = block_size if handler is not None else count
    px = 1
    r = 1
    while px < count:
        stop = min(px + step, count)
        r = _fill(ps, px, stop, r)
        if handler is not None:
            for p in ps[px:stop].tolist():
                handler(p)
        px = stop

    return ps


if __name__ == '__main__':
    import time

    for n in [10**4, 10**5, 10**6]:
        t0 = time.time()
        ps = generate(n)
        print(f"  {n:>9,} primes: last = {ps[-1]:,}  ({time.time() - t0:.2f}s)")
