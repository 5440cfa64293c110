#!/usr/bin/env python3
"""Benchmark parallel pair search.

Scores a random 12-male x 12-female roster at workers=1,2,4,8
and reports wall-clock times.
"""

import time

import numpy as np

from chocobo_breeding.config import default_config
from chocobo_breeding.search import find_best_pairing
from chocobo_breeding.types import make_candidate


def make_roster(n_per_gender=12, seed=42):
    """Create a random roster with stats in 1..4."""
    rng = np.random.default_rng(seed)
    roster = []
    for gender in ('male', 'female'):
        for i in range(n_per_gender):
            stats = rng.integers(1, 5, size=(2, 5))
            roster.append(make_candidate(
                gender, stats[0].tolist(), stats[1].tolist(),
                attempts_remaining=int(rng.integers(1, 10)),
                name=f"{gender}_{i}",
            ))
    return roster


def benchmark(n_per_gender=12, workers_list=None, seed=42):
    """Run benchmark across different worker counts."""
    if workers_list is None:
        workers_list = [1, 2, 4, 8]

    roster = make_roster(n_per_gender, seed)
    results = {}
    for w in workers_list:
        config = default_config()
        config.search.parallel_workers = w

        t0 = time.perf_counter()
        best = find_best_pairing(roster, config=config)
        elapsed = time.perf_counter() - t0

        results[w] = {
            'elapsed': elapsed,
            'pair': (best.father.label, best.mother.label),
            'score': best.score,
        }
        print(f"  workers={w:2d}  time={elapsed:6.2f}s  "
              f"pair={best.father.label}+{best.mother.label}  "
              f"score={best.score:.2f}")

    return results


if __name__ == "__main__":
    print("Benchmark: 12 males x 12 females, rank scheme")
    print(f"{'='*60}")
    results = benchmark(n_per_gender=12)

    print(f"\n{'='*60}")
    print("Summary:")
    serial_time = results[1]['elapsed']
    for w, r in results.items():
        speedup = serial_time / r['elapsed'] if r['elapsed'] > 0 else 0
        print(f"  workers={w:2d}: {r['elapsed']:6.2f}s  "
              f"speedup={speedup:.2f}x")
