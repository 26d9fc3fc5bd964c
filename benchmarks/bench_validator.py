"""Validator benchmark.

Measures p99 latency of SearchValidator.validate() per channel across clean
terms, pattern hits, blacklist hits, and long adversarial input. Every search
request pays this cost before the catalog search runs.

Usage (from project root):
    python benchmarks/bench_validator.py
"""

from __future__ import annotations

import statistics
import time
from typing import Any

from searchblocker.models.verdict import Channel
from searchblocker.policy.store import PolicySnapshot, StaticPolicyStore
from searchblocker.scanner.validator import SearchValidator

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

CLEAN_SHORT = "red cotton shirt"
CLEAN_LONG = "waterproof hiking boots size 42 " * 64  # ~2k chars
PATTERN_HIT = "shirt' union select password from admin_user --"
BLACKLIST_HIT = "discount casino chips"
ADVERSARIAL = ("un" + "i" * 50 + "o ") * 200

POLICY = PolicySnapshot(
    global_enabled=True,
    channel_enabled={channel: True for channel in Channel},
    blacklist=tuple(f"blocked-term-{i}" for i in range(200)) + ("casino",),
    regex_filter_enabled=True,
)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def measure_p99(fn: Any, *args: Any, n: int = 1_000) -> tuple[float, float, float]:
    """Run fn(*args) n times and return (p50, p99, mean) in milliseconds."""
    latencies: list[float] = []
    for _ in range(n):
        start = time.perf_counter()
        fn(*args)
        latencies.append((time.perf_counter() - start) * 1_000)
    latencies.sort()
    return latencies[int(0.50 * n)], latencies[int(0.99 * n)], statistics.mean(latencies)


def run_benchmarks(budget_ms: float = 1.0) -> bool:
    """Run all scenarios. Returns True if every p99 is within budget."""
    warmup = 100
    n = 1_000
    validator = SearchValidator(StaticPolicyStore(POLICY))

    scenarios = [
        ("Clean short", CLEAN_SHORT),
        ("Clean long (~2k chars)", CLEAN_LONG),
        ("Pattern hit", PATTERN_HIT),
        ("Blacklist hit (201 terms)", BLACKLIST_HIT),
        ("Adversarial near-miss", ADVERSARIAL),
    ]

    print("=" * 70)
    print("SearchBlocker validate() benchmark")
    print(f"Warmup: {warmup} calls | Measurement: {n} calls each | Budget: p99 <= {budget_ms}ms")
    print("=" * 70)

    all_pass = True
    for channel in (Channel.FRONTEND, Channel.REST):
        print(f"Channel: {channel.label}")
        for name, term in scenarios:
            for _ in range(warmup):
                validator.validate(channel, term)
            p50, p99, mean = measure_p99(validator.validate, channel, term, n=n)
            passed = p99 <= budget_ms
            all_pass = all_pass and passed
            status = "PASS" if passed else "FAIL"
            print(f"  [{status}] {name}")
            print(f"          p50={p50:.3f}ms  p99={p99:.3f}ms  mean={mean:.3f}ms")

    print("=" * 70)
    print("RESULT: " + ("ALL WITHIN BUDGET" if all_pass else "BUDGET EXCEEDED"))
    print("=" * 70)
    return all_pass


if __name__ == "__main__":
    import sys

    sys.exit(0 if run_benchmarks() else 1)
