"""
Bulk load and dump of prime tables.

Responsibility: the binary format only. A table file is a gzip-compressed
stream of big-endian signed 32-bit integers holding the first N primes,
ascending from 2. The reader trusts that invariant and checks nothing but
the length.
"""

import gzip
import numbers
import os
from pathlib import Path
from typing import Optional

import numpy as np

from .errors import InitializationError, InvalidArgumentError
from .generator import DEFAULT_BLOCK_SIZE, _check_block_size, _check_count, generate
from .intmath import INT32_MAX
from .table import PrimeTable

WIRE_DTYPE = np.dtype('>i4')
WIRE_ITEMSIZE = WIRE_DTYPE.itemsize


def read_primes(stream, how_many: Optional[int] = None) -> np.ndarray:
    """
    Read primes from a binary stream.

    Parameters
    ----------
    stream : binary file-like
        Source of big-endian int32 values.
    how_many : int, optional
        Exact number of values to read. If None, reads to end of stream.

    Returns
    -------
    np.ndarray
        Native-endian int32 array.

    Raises
    ------
    InitializationError
        If the stream is shorter than requested, ends in a partial value, or
        cannot be read. The underlying error is chained.
    """
    try:
        if how_many is None:
            data = stream.read()
            if len(data) % WIRE_ITEMSIZE:
                raise EOFError(f"stream length {len(data)} is not a multiple of {WIRE_ITEMSIZE}")
        else:
            if isinstance(how_many, bool) or not isinstance(how_many, numbers.Integral) or how_many < 0:
                raise InvalidArgumentError(f"how_many must be a non-negative integer, got {how_many!r}")
            wanted = int(how_many) * WIRE_ITEMSIZE
            data = stream.read(wanted)
            if len(data) < wanted:
                raise EOFError(f"expected {how_many} primes, stream ended after {len(data) // WIRE_ITEMSIZE}")
        return np.frombuffer(data, dtype=WIRE_DTYPE).astype(np.int32)
    except Exception as exc:
        raise InitializationError(f"could not read primes: {exc}") from exc


def read_table(stream, how_many: Optional[int] = None) -> PrimeTable:
    """Build a PrimeTable from a binary stream (see read_primes)."""
    return PrimeTable._adopt(read_primes(stream, how_many))


def load_table(path, how_many: Optional[int] = None) -> PrimeTable:
    """
    Load a PrimeTable from a gzip-compressed table file.

    Parameters
    ----------
    path : str or Path
        File written by dump_primes.
    how_many : int, optional
        Number of primes to load. Defaults to all primes in the file.

    Returns
    -------
    PrimeTable
    """
    try:
        with gzip.open(Path(path), 'rb') as f:
            return read_table(f, how_many)
    except InitializationError:
        raise
    except Exception as exc:
        raise InitializationError(f"could not load primes from {path}: {exc}") from exc


def write_primes(stream, primes) -> int:
    """
    Write primes to a binary stream in table-file format.

    Raises InvalidArgumentError, before writing anything, if a value does
    not fit into a signed 32-bit integer.

    Returns
    -------
    int
        Number of primes written.
    """
    try:
        data = np.asarray(primes, dtype=np.int64)
    except OverflowError as exc:
        raise InvalidArgumentError(f"primes do not fit into int32: {exc}") from exc
    if data.size and (data.min() < 0 or data.max() > INT32_MAX):
        raise InvalidArgumentError(
            f"primes must lie in [ 0 .. {INT32_MAX} ], got [ {data.min()} .. {data.max()} ]"
        )
    stream.write(data.astype(WIRE_DTYPE).tobytes())
    return len(data)


class _BlockWriter:
    """Generator handler that buffers primes and flushes them in blocks."""

    def __init__(self, stream, block_size: int):
        self.stream = stream
        self.block_size = block_size
        self.buffer = []
        self.written = 0

    def __call__(self, p: int):
        self.buffer.append(p)
        if len(self.buffer) >= self.block_size:
            self.flush()

    def flush(self):
        if self.buffer:
            self.written += write_primes(self.stream, self.buffer)
            self.buffer = []


def dump_primes(path, count: int, block_size: int = DEFAULT_BLOCK_SIZE) -> int:
    """
    Generate `count` primes and stream them into a gzip table file.

    Primes are written while generation is still running, in blocks of
    `block_size`, to a temporary file next to `path`. The file only replaces
    `path` once all `count` primes are written; on any failure `path` is left
    as it was and the temporary file is removed.

    Parameters
    ----------
    path : str or Path
        Output file; parent directories are created.
    count : int
        Number of primes to generate.
    block_size : int
        Primes per write.

    Returns
    -------
    int
        Number of primes written.
    """
    count = _check_count(count, np.dtype(np.int32))
    block_size = _check_block_size(block_size)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with gzip.open(tmp, 'wb') as f:
            writer = _BlockWriter(f, block_size)
            generate(count, handler=writer, block_size=block_size)
            writer.flush()
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()
    return writer.written
