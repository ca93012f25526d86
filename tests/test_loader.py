"""
Tests for the table file format and bulk loading.

Files are gzip-compressed big-endian int32 streams. Any failure to build a
table from a stream surfaces as InitializationError with the cause chained.
"""

import gzip
import io
from pathlib import Path

import numpy as np
import pytest

from primetable import loader
from primetable.errors import InitializationError, InvalidArgumentError
from primetable.generator import generate
from primetable.loader import dump_primes, load_table, read_primes, read_table, write_primes


class TestStreams:
    """read_primes / write_primes on in-memory streams."""

    def test_big_endian_layout(self):
        """Values are written as 4-byte big-endian integers."""
        buf = io.BytesIO()
        assert write_primes(buf, [2, 3, 2147483647]) == 3
        assert buf.getvalue() == b'\x00\x00\x00\x02\x00\x00\x00\x03\x7f\xff\xff\xff'

    def test_read_back(self):
        ps = generate(500)
        buf = io.BytesIO()
        write_primes(buf, ps)
        buf.seek(0)

        loaded = read_primes(buf)
        assert loaded.dtype == np.int32
        assert np.array_equal(loaded, ps)

    def test_reads_exactly_how_many(self):
        """Only the requested prefix is consumed."""
        buf = io.BytesIO()
        write_primes(buf, generate(100))
        buf.seek(0)

        loaded = read_primes(buf, 10)
        assert loaded.tolist() == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
        assert buf.tell() == 40

    def test_read_zero(self):
        assert len(read_primes(io.BytesIO(b''), 0)) == 0
        assert len(read_primes(io.BytesIO(b''))) == 0

    def test_read_table(self):
        buf = io.BytesIO()
        write_primes(buf, generate(1229))
        buf.seek(0)

        table = read_table(buf, 1229)
        assert table.size() == 1229
        assert table.is_prime(9973)
        assert not table.array.flags.writeable


    def test_write_rejects_values_outside_int32(self):
        """Values that do not fit the wire format are refused, not wrapped."""
        for primes in ([2, 2**31 + 11], [-3, 2], [2, 2**70]):
            buf = io.BytesIO()
            with pytest.raises(InvalidArgumentError):
                write_primes(buf, primes)
            assert buf.getvalue() == b'', f"partial write for {primes}"

    def test_write_wide_table_within_range(self):
        """An int64 table is fine as long as its values fit into int32."""
        ps = generate(100, dtype=np.int64)
        buf = io.BytesIO()
        write_primes(buf, ps)
        buf.seek(0)
        assert np.array_equal(read_primes(buf), ps)


class TestStreamFailures:
    """Short or malformed streams fail with InitializationError."""

    def test_short_stream(self):
        buf = io.BytesIO()
        write_primes(buf, generate(5))
        buf.seek(0)

        with pytest.raises(InitializationError) as excinfo:
            read_primes(buf, 6)
        assert isinstance(excinfo.value.__cause__, EOFError)

    def test_partial_value(self):
        """A trailing partial integer is malformed."""
        with pytest.raises(InitializationError) as excinfo:
            read_primes(io.BytesIO(b'\x00\x00\x00\x02\x00'))
        assert isinstance(excinfo.value.__cause__, EOFError)

    def test_negative_how_many(self):
        with pytest.raises(InitializationError) as excinfo:
            read_primes(io.BytesIO(b''), -1)
        assert isinstance(excinfo.value.__cause__, InvalidArgumentError)

    def test_unreadable_stream(self):
        """Errors raised by the stream itself are wrapped."""
        class Broken(io.RawIOBase):
            def read(self, size=-1):
                raise OSError("device not ready")

        with pytest.raises(InitializationError) as excinfo:
            read_table(Broken(), 10)
        assert isinstance(excinfo.value.__cause__, OSError)


class TestFiles:
    """dump_primes / load_table through gzip files."""

    def test_dump_and_load(self, tmp_path: Path):
        path = tmp_path / 'primes.gz'
        assert dump_primes(path, 1000, block_size=64) == 1000

        table = load_table(path)
        assert table.size() == 1000
        assert np.array_equal(table.array, generate(1000))

    def test_file_is_gzip_of_big_endian_ints(self, tmp_path: Path):
        path = tmp_path / 'primes.gz'
        dump_primes(path, 3)
        with gzip.open(path, 'rb') as f:
            assert f.read() == b'\x00\x00\x00\x02\x00\x00\x00\x03\x00\x00\x00\x05'

    def test_load_prefix(self, tmp_path: Path):
        path = tmp_path / 'primes.gz'
        dump_primes(path, 1000)

        table = load_table(path, 10)
        assert list(table) == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]

    def test_load_more_than_file_holds(self, tmp_path: Path):
        path = tmp_path / 'primes.gz'
        dump_primes(path, 100)

        with pytest.raises(InitializationError):
            load_table(path, 101)

    def test_creates_parent_directories(self, tmp_path: Path):
        path = tmp_path / 'nested' / 'dir' / 'primes.gz'
        dump_primes(path, 10)
        assert load_table(path).size() == 10

    def test_dump_zero(self, tmp_path: Path):
        path = tmp_path / 'empty.gz'
        assert dump_primes(path, 0) == 0
        assert load_table(path).size() == 0

    def test_rejected_dump_keeps_existing_file(self, tmp_path: Path):
        """Invalid arguments are refused before the target is touched."""
        path = tmp_path / 'primes.gz'
        dump_primes(path, 1000)

        for count, block_size in ((-1, 64), (2.5, 64), (10, 0)):
            with pytest.raises(InvalidArgumentError):
                dump_primes(path, count, block_size=block_size)

        assert load_table(path).size() == 1000
        assert [p.name for p in tmp_path.iterdir()] == ['primes.gz']

    def test_interrupted_dump_keeps_existing_file(self, tmp_path: Path, monkeypatch):
        """A dump that stops part-way leaves neither a prefix file nor a temp file."""
        path = tmp_path / 'primes.gz'
        dump_primes(path, 1000)

        real_generate = loader.generate

        def interrupted(count, handler=None, **kwargs):
            def stop_early(p):
                if p > 5000:
                    raise KeyboardInterrupt()
                handler(p)
            return real_generate(count, handler=stop_early, **kwargs)

        monkeypatch.setattr(loader, 'generate', interrupted)
        with pytest.raises(KeyboardInterrupt):
            dump_primes(path, 100000, block_size=64)

        table = load_table(path)
        assert table.size() == 1000
        assert np.array_equal(table.array, generate(1000))
        assert [p.name for p in tmp_path.iterdir()] == ['primes.gz']

    def test_interrupted_dump_creates_nothing(self, tmp_path: Path, monkeypatch):
        """Without a previous file, an interrupted dump leaves no file at all."""
        path = tmp_path / 'primes.gz'

        def interrupted(count, handler=None, **kwargs):
            handler(2)
            raise KeyboardInterrupt()

        monkeypatch.setattr(loader, 'generate', interrupted)
        with pytest.raises(KeyboardInterrupt):
            dump_primes(path, 100)

        assert list(tmp_path.iterdir()) == []

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(InitializationError) as excinfo:
            load_table(tmp_path / 'missing.gz')
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_corrupt_file(self, tmp_path: Path):
        path = tmp_path / 'corrupt.gz'
        path.write_bytes(b'this is not gzip data')

        with pytest.raises(InitializationError) as excinfo:
            load_table(path)
        assert isinstance(excinfo.value.__cause__, OSError)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
