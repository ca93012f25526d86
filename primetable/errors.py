"""
Exception types.

Responsibility: the error vocabulary shared by generation, loading and queries.
"""


class PrimeTableError(Exception):
    """Base class for all errors raised by primetable."""


class InvalidArgumentError(PrimeTableError, ValueError):
    """A count, dtype or integer argument is outside what is supported."""


class IndexOutOfRangeError(InvalidArgumentError, IndexError):
    """Indexed access outside [0, size)."""


class InitializationError(PrimeTableError, RuntimeError):
    """
    A table could not be built from an external source.

    Always raised with the originating exception chained as ``__cause__``.
    Indicates a setup problem (missing or truncated data file), not a
    condition callers are expected to recover from.
    """
