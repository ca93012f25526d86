"""Prime tables up to 2**31 - 1: generation, bulk loading, membership and factorization."""

from .errors import (
    IndexOutOfRangeError,
    InitializationError,
    InvalidArgumentError,
    PrimeTableError,
)
from .generator import NUMBER_OF_PRIMES_UPTO_INT32_MAX, generate
from .intmath import INT32_MAX, INT64_MAX, isqrt32, isqrt64
from .loader import dump_primes, load_table, read_primes, read_table, write_primes
from .table import PrimeTable, generate_table

__version__ = '0.1.0'
