#!/usr/bin/env python3
"""
Kaspa Vanity Address Generator
==============================
Generates random BIP39 mnemonics and derives Kaspa addresses
(m/44'/111111'/0'/0/i) until one matches a prefix and/or suffix.

Matching starts at the 3rd character of the address payload: the first two
are the version marker 'q' and one of q/p/z/r.

Usage:
    kas-vanity --prefix test
    kas-vanity --suffix 2025 --words 12 --scan-limit 10
    VANITY_PREFIX=test NUM_WORKERS=4 kas-vanity
"""

import argparse
import os
import sys

from hd_key import get_engine
from kaspa_address import CHARSET, PREFIXES
from vanity import EntropyError, PatternError, SearchPattern, pattern_probability
from vanity_search import SearchConfig, search

# ============================================================
# Configuration (all overridable via environment variables)
# ============================================================
VANITY_PREFIX = os.getenv("VANITY_PREFIX", "") or None
VANITY_SUFFIX = os.getenv("VANITY_SUFFIX", "") or None
NUM_WORKERS = os.getenv("NUM_WORKERS", "") or str(os.cpu_count() or 1)
CASE_SENSITIVE = os.getenv("CASE_SENSITIVE", "false").lower() == "true"
WORD_COUNT = os.getenv("WORD_COUNT", "24")
SCAN_LIMIT = os.getenv("SCAN_LIMIT", "1")
NETWORK = os.getenv("NETWORK", "mainnet")


def _positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return n


def _word_count(value):
    n = int(value)
    if n not in (12, 24):
        raise argparse.ArgumentTypeError(f"must be 12 or 24, got {value}")
    return n


def _network(value):
    if value not in PREFIXES:
        raise argparse.ArgumentTypeError(f"unknown network {value!r}, expected one of {', '.join(sorted(PREFIXES))}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kas-vanity", description="Kaspa Vanity Address Generator")
    parser.add_argument("-p", "--prefix", default=VANITY_PREFIX,
                        help="Prefix to search for, matched from the 3rd payload character")
    parser.add_argument("-s", "--suffix", default=VANITY_SUFFIX,
                        help="Suffix to search for (long suffixes are expensive)")
    parser.add_argument("-t", "--threads", type=_positive_int, default=NUM_WORKERS,
                        help="Number of worker threads (default: all logical cores)")
    parser.add_argument("--case-sensitive", action=argparse.BooleanOptionalAction, default=CASE_SENSITIVE,
                        help="Case sensitive matching (--no-case-sensitive overrides CASE_SENSITIVE=true)")
    parser.add_argument("-w", "--words", type=_word_count, choices=(12, 24), default=WORD_COUNT,
                        help="Mnemonic word count")
    parser.add_argument("--scan-limit", type=_positive_int, default=SCAN_LIMIT,
                        help="Addresses checked per mnemonic (indices 0..N-1)")
    parser.add_argument("--network", type=_network, choices=sorted(PREFIXES), default=NETWORK,
                        help="Address network prefix")
    return parser


def print_usage_error():
    print("Error: You must specify at least one of --prefix or --suffix", file=sys.stderr)
    print(file=sys.stderr)
    print("Examples:", file=sys.stderr)
    print("  kas-vanity --prefix test", file=sys.stderr)
    print("  kas-vanity --suffix 2025", file=sys.stderr)
    print("  kas-vanity --prefix test --suffix 2025", file=sys.stderr)


def print_charset_error(err: PatternError):
    print(f"Error: {err}", file=sys.stderr)
    print(file=sys.stderr)
    print("Bech32 encoding excludes the following characters to avoid confusion:", file=sys.stderr)
    print("  - '1' : separator", file=sys.stderr)
    print("  - 'b' : confused with '6'", file=sys.stderr)
    print("  - 'i' : confused with '1' and 'l'", file=sys.stderr)
    print("  - 'o' : confused with '0' (zero)", file=sys.stderr)
    print(file=sys.stderr)
    print(f"Valid Bech32 characters: {CHARSET}", file=sys.stderr)


def print_banner(config: SearchConfig):
    pattern = config.pattern
    print("=" * 65)
    print("  KASPA VANITY ADDRESS GENERATOR")
    print("=" * 65)
    print(f"  Prefix:             {pattern.prefix or '(any)'}")
    print(f"  Suffix:             {pattern.suffix or '(any)'}")
    print(f"  Case sensitive:     {'yes' if pattern.case_sensitive else 'no'}")
    print(f"  Difficulty:         1 in {1.0 / pattern_probability(pattern):,.0f} (approx)")
    print(f"  Mnemonic words:     {config.word_count}")
    print(f"  Scan limit:         {config.scan_limit} addresses per mnemonic")
    print(f"  Network:            {config.network} ({config.address_prefix}:)")
    print(f"  Threads:            {config.threads}")
    print(f"  Crypto engine:      {get_engine()}")
    print("=" * 65, flush=True)


def print_match(match, scan_limit: int):
    print(f"\n{'*' * 65}")
    print("  [MATCH FOUND]")
    print(f"  Address:    {match.address}")
    print(f"  Mnemonic:   {match.mnemonic}")
    if scan_limit > 1:
        print(f"  Path Index: {match.index} ({match.path})")
    print(f"  Time taken: {match.elapsed:.2f}s")
    print(f"{'*' * 65}\n", flush=True)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    pattern = SearchPattern(args.prefix, args.suffix, args.case_sensitive)
    if pattern.is_empty:
        print_usage_error()
        return 1
    try:
        pattern.validate()
    except PatternError as e:
        print_charset_error(e)
        return 1

    config = SearchConfig(
        pattern=pattern,
        threads=args.threads,
        word_count=args.words,
        scan_limit=args.scan_limit,
        network=args.network,
    )
    print_banner(config)

    try:
        match = search(config)
    except EntropyError as e:
        print(f"\nFATAL: {e}", file=sys.stderr)
        print("  The system randomness source cannot be trusted; aborting.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130

    print_match(match, config.scan_limit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
