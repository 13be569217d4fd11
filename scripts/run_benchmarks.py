#!/usr/bin/env python3
from __future__ import annotations

import argparse
import math
import statistics as stats
import time
from pathlib import Path
from typing import List, Tuple

from cyclegrid.board import parse_board
from cyclegrid.orbits import enumerate_canonical
from cyclegrid.simulator import run_simulation
from cyclegrid.tracking import log_metrics, log_params, tracked_run

SAMPLE_BOARD = """
#######
#@.~~.#
#.#.>.#
#~..<F#
#@...F#
#######
"""


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    return m, 1.96 * (s / math.sqrt(len(values)))


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Time enumeration and corpus simulation")
    ap.add_argument("--repeats", type=int, default=5)
    ap.add_argument("--max-length", type=int, default=8)
    ap.add_argument("--max-steps", type=int, default=128)
    ap.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    ap.add_argument("--log-dir", type=Path, default=Path("runs"))
    ns = ap.parse_args(argv)

    board = parse_board(SAMPLE_BOARD)
    with tracked_run(ns.tracking == "mlflow", run_name="benchmarks", log_dir=ns.log_dir):
        log_params({"repeats": ns.repeats, "max_length": ns.max_length, "max_steps": ns.max_steps})
        enum_times: List[float] = []
        sim_times: List[float] = []
        for _ in range(ns.repeats):
            t0 = time.perf_counter()
            corpus = [p for n in range(1, ns.max_length + 1) for p in enumerate_canonical(n)]
            t1 = time.perf_counter()
            for plan in corpus:
                run_simulation(board, plan, ns.max_steps)
            t2 = time.perf_counter()
            enum_times.append(t1 - t0)
            sim_times.append(t2 - t1)
        m_enum, h_enum = ci95(enum_times)
        m_sim, h_sim = ci95(sim_times)
        log_metrics({
            "enumerate_mean_s": m_enum,
            "enumerate_ci95_half_s": h_enum,
            "simulate_corpus_mean_s": m_sim,
            "simulate_corpus_ci95_half_s": h_sim,
            "corpus_size": float(len(corpus)),
        })
    print(f"corpus_size={len(corpus)} (lengths 1..{ns.max_length})")
    print(f"enumerate: mean={m_enum:.4f}s ± {h_enum:.4f}s (95% CI)")
    print(f"simulate corpus: mean={m_sim:.4f}s ± {h_sim:.4f}s (95% CI)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
