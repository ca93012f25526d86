#!/usr/bin/env python3
"""
Generate a prime table file.

Generates the first `count` primes, streams them into a gzip file of
big-endian int32 values, and optionally loads the file back to check it.

Usage:
    python run_generate.py
    python run_generate.py --config config/custom.yaml
    python run_generate.py --count 105097565 --output data/primes.gz
"""

import argparse
import yaml
from pathlib import Path
import time

import numpy as np

from primetable.generator import NUMBER_OF_PRIMES_UPTO_INT32_MAX
from primetable.loader import dump_primes, load_table


def verify(path: Path, count: int):
    """Load the written file back and check the table invariants."""
    table = load_table(path)
    ps = table.array

    assert len(table) == count, f"expected {count} primes, file holds {len(table)}"
    if count == 0:
        return table
    assert ps[0] == 2, f"first prime should be 2, got {ps[0]}"
    assert np.all(np.diff(ps) > 0), "table is not strictly ascending"

    # Every composite below the largest prime must factor into table primes.
    for n in (132, 53176, table.largest - 1):
        if n >= table.largest:
            continue
        factors = table.prime_factors(n)
        assert int(np.prod(factors, dtype=object)) == n, f"factorization of {n} is incomplete: {factors}"

    return table


def main():
    parser = argparse.ArgumentParser(description='Generate a gzip prime table file')
    parser.add_argument('--config', type=str, default='config/default.yaml',
                        help='Path to config file')
    parser.add_argument('--count', type=float, default=None,
                        help=f'Number of primes (max {NUMBER_OF_PRIMES_UPTO_INT32_MAX:,})')
    parser.add_argument('--output', type=str, default=None,
                        help='Output file')
    parser.add_argument('--no-verify', action='store_true',
                        help='Skip loading the file back')
    args = parser.parse_args()

    # Load config
    with open(args.config) as f:
        config = yaml.safe_load(f)

    count = int(args.count) if args.count is not None else int(config['count'])
    output = Path(args.output if args.output is not None else config['output'])
    block_size = int(config.get('block_size', 65536))
    check = config.get('verify', True) and not args.no_verify

    print("=" * 60)
    print("Prime Table Generation")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  count = {count:,}")
    print(f"  output = {output}")
    print(f"  block_size = {block_size:,}")
    print(f"  verify = {check}")
    print()

    total_start = time.time()

    print(f"Generating {count:,} primes...", end=" ", flush=True)
    t0 = time.time()
    written = dump_primes(output, count, block_size=block_size)
    print(f"{time.time() - t0:.1f}s")
    print(f"  wrote {written:,} primes, {output.stat().st_size:,} bytes")

    if check:
        print("Verifying...", end=" ", flush=True)
        t0 = time.time()
        table = verify(output, count)
        print(f"{time.time() - t0:.1f}s")
        print(f"  {table}")

    print(f"\nTotal runtime: {time.time() - total_start:.1f}s")
    print(f"Output saved to: {output.absolute()}")


if __name__ == '__main__':
    main()
