"""
Immutable prime table and its queries.

Responsibility: membership, indexed access and factorization over an
ascending, gapless table of primes starting at 2. Generation lives in
generator.py, stream decoding in loader.py; both end up here.
"""

import numbers
from typing import Callable, Iterator, List, Optional

import numpy as np

from .errors import IndexOutOfRangeError, InvalidArgumentError
from .generator import NUMBER_OF_PRIMES_UPTO_INT32_MAX, generate


def _is_integer(n) -> bool:
    return isinstance(n, numbers.Integral) and not isinstance(n, bool)


class PrimeTable:
    """
    Read-only sequence of the first len(table) primes.

    table[i] is the (i+1)-th prime: table[0] == 2. The backing array is
    frozen before the constructor returns, so a published table can be
    queried from any number of threads without locking.

    Queries only know what the table holds. A table of the first k primes
    reports primes above table.largest as not prime, and drops cofactors
    it cannot divide out (see prime_factors).
    """

    def __init__(self, primes, dtype=np.int32):
        arr = np.array(primes, dtype=dtype)
        if arr.ndim != 1:
            raise InvalidArgumentError(f"primes must be one-dimensional, got shape {arr.shape}")
        arr.flags.writeable = False
        self._primes = arr

    @classmethod
    def _adopt(cls, arr: np.ndarray) -> 'PrimeTable':
        """Take ownership of a freshly built 1-D array without copying it."""
        arr.flags.writeable = False
        table = cls.__new__(cls)
        table._primes = arr
        return table

    @property
    def array(self) -> np.ndarray:
        """Read-only view of the underlying array."""
        return self._primes

    @property
    def largest(self) -> Optional[int]:
        """Largest prime held, or None for an empty table."""
        if len(self._primes) == 0:
            return None
        return int(self._primes[-1])

    def size(self) -> int:
        return len(self._primes)

    def __len__(self) -> int:
        return len(self._primes)

    def at(self, index: int) -> int:
        """
        Return the prime at a 0-based index; at(0) == 2.

        Negative indices are rejected rather than counted from the end.
        """
        if not _is_integer(index):
            raise InvalidArgumentError(f"index must be an integer, got {index!r}")
        if index < 0 or index >= len(self._primes):
            raise IndexOutOfRangeError(
                f"{index} is out of range for index: [ 0 .. {len(self._primes) - 1} ]"
            )
        return int(self._primes[index])

    def __getitem__(self, index: int) -> int:
        return self.at(index)

    def __iter__(self) -> Iterator[int]:
        for p in self._primes:
            yield int(p)

    def is_prime(self, n: int) -> bool:
        """
        Check whether n is prime by binary search over the table.

        Note: if fewer primes were loaded than exist below n, a prime n larger
        than `largest` is reported as False.

        Parameters
        ----------
        n : int
            Integer to check.

        Returns
        -------
        bool
            True iff n is one of the primes in this table.
        """
        if not _is_integer(n):
            raise InvalidArgumentError(f"is_prime expects an integer, got {n!r}")
        n = int(n)
        largest = self.largest
        if largest is None or n < 2 or n > largest:
            return False
        i = int(np.searchsorted(self._primes, n))
        return int(self._primes[i]) == n

    def __contains__(self, n) -> bool:
        if not _is_integer(n):
            return False
        return self.is_prime(int(n))

    def prime_factors(self, n: int, handler: Optional[Callable[[int], None]] = None) -> List[int]:
        """
        Enumerate the prime factors of n with multiplicity, smallest first.

        Divides by the table's primes in ascending order until the remainder
        is 1 or the table runs out. A remainder that is still greater than
        `largest` at that point is not reported: with a table that is too
        small the result is incomplete, but no error is raised.

        Parameters
        ----------
        n : int
            Integer to factor. Values <= 1 have no factors.
        handler : callable, optional
            Called with each factor as it is found.

        Returns
        -------
        list
            Prime factors with repetition, ascending.
        """
        if not _is_integer(n):
            raise InvalidArgumentError(f"prime_factors expects an integer, got {n!r}")
        factors = []

        def emit(p: int):
            factors.append(p)
            if handler is not None:
                handler(p)

        r = int(n)
        size = len(self._primes)
        i = 0
        while r > 1 and i < size:
            p = int(self._primes[i])
            if p * p > r:
                # r has no prime divisor <= its root, so r is prime. Scanning
                # on would find it iff the table reaches it.
                if r <= self.largest:
                    emit(r)
                break
            if r % p == 0:
                emit(p)
                r //= p
            else:
                i += 1
        return factors

    def prime_factor_set(self, n: int) -> List[int]:
        """Distinct prime factors of n, ascending."""
        return sorted(set(self.prime_factors(n)))

    def __repr__(self) -> str:
        return f"PrimeTable(size={len(self._primes)}, largest={self.largest})"


def generate_table(count: int = NUMBER_OF_PRIMES_UPTO_INT32_MAX,
                   handler: Optional[Callable[[int], None]] = None) -> PrimeTable:
    """
    Generate a table holding the first `count` primes.

    The default covers every prime that fits into int32, which takes a while.
    """
    return PrimeTable._adopt(generate(count, handler=handler))
