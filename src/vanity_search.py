"""
Parallel vanity search.

Workers pull identical "one mnemonic, one batch" tasks from a thread pool.
All of them share a single SearchState: a write-once found flag and a
processed-address counter used for progress output. The first worker to
match wins the flag and hands its result back to search(), which stops
feeding the pool and returns it.
"""

import os
import sys
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from threading import Event, Lock
from typing import NamedTuple, Optional, Tuple

from kaspa_address import PREFIXES
from vanity import (
    SearchPattern,
    derivation_path,
    derive_batch,
    generate_random_mnemonic,
    matches,
    pattern_probability,
)

PROGRESS_EVERY = 1000


class SearchConfig(NamedTuple):
    pattern: SearchPattern
    threads: int = os.cpu_count() or 1
    word_count: int = 24
    scan_limit: int = 1
    network: str = "mainnet"

    @property
    def address_prefix(self) -> str:
        return PREFIXES[self.network]


class Match(NamedTuple):
    address: str
    mnemonic: str
    index: int
    path: str
    elapsed: float


class SearchState:
    """Shared between all workers of one search."""

    __slots__ = ("_found", "_found_lock", "_processed", "_processed_lock")

    def __init__(self):
        self._found = Event()
        self._found_lock = Lock()
        self._processed = 0
        self._processed_lock = Lock()

    def is_found(self) -> bool:
        return self._found.is_set()

    def mark_found(self) -> bool:
        """Set the flag. True only for the caller that set it first."""
        with self._found_lock:
            if self._found.is_set():
                return False
            self._found.set()
            return True

    @property
    def processed(self) -> int:
        return self._processed

    def add_processed(self, count: int) -> Tuple[int, int]:
        with self._processed_lock:
            before = self._processed
            self._processed = before + count
            return before, self._processed


def estimate_probability(p: float, n: int) -> float:
    """Chance of at least one match after n independent tries."""
    return 1.0 - (1.0 - p) ** n


def crossed_boundary(before: int, after: int, every: int = PROGRESS_EVERY) -> bool:
    return before // every != after // every


def search_once(config: SearchConfig, state: SearchState, probability: float, start_time: float) -> Optional[Match]:
    """Generate one mnemonic, derive its batch and scan it in order."""
    if state.is_found():
        return None

    mnemonic = generate_random_mnemonic(config.word_count)
    addresses = derive_batch(mnemonic, config.scan_limit, config.address_prefix)
    if not addresses:
        print("  ⚠ Warning: Failed to derive addresses (should be rare)", file=sys.stderr, flush=True)
        return None

    before, after = state.add_processed(len(addresses))
    if crossed_boundary(before, after):
        chance = estimate_probability(probability, after)
        print(f"  Checked {after:,} addresses... ({chance * 100:.2f}% chance)", flush=True)

    for index, address in addresses:
        if matches(address, config.pattern):
            if not state.mark_found():
                return None
            return Match(
                address=address,
                mnemonic=mnemonic,
                index=index,
                path=derivation_path(index),
                elapsed=time.time() - start_time,
            )
    return None


def search(config: SearchConfig, state: Optional[SearchState] = None) -> Match:
    """
    Run until some worker finds a match and return it.

    There is no other exit: with an unmatchable pattern this never returns.
    Exceptions raised inside a worker (EntropyError) propagate to the caller.
    """
    if config.pattern.is_empty:
        raise ValueError("search needs a prefix or a suffix")
    if config.scan_limit < 1:
        raise ValueError("scan limit must be at least 1")
    if state is None:
        state = SearchState()

    probability = pattern_probability(config.pattern)
    start_time = time.time()
    in_flight = max(1, config.threads) * 2

    with ThreadPoolExecutor(max_workers=max(1, config.threads)) as pool:
        pending = {
            pool.submit(search_once, config, state, probability, start_time)
            for _ in range(in_flight)
        }
        try:
            while True:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    result = fut.result()
                    if result is not None:
                        return result
                while len(pending) < in_flight and not state.is_found():
                    pending.add(pool.submit(search_once, config, state, probability, start_time))
                if not pending:
                    raise RuntimeError("search state was marked found by another caller")
        finally:
            # remaining workers see the flag and return without working
            state.mark_found()
            for fut in pending:
                fut.cancel()
