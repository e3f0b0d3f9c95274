"""Micro-benchmark for incidence assembly, topological reduction and equation splicing."""

from __future__ import annotations

import argparse
import cProfile
import pstats
import time

from ctopo.circuits import Circuit
from ctopo.circuits.library import capacitor, diode, resistor, voltagesource
from ctopo.linalg import topomat


def build_ladder(sections: int) -> Circuit:
    """Series resistors with a capacitor and a diode to ground at every tap."""
    circuit = Circuit()
    source = voltagesource(1)
    circuit.connect(source.pin("-"), "gnd")
    tap = source.pin("+")
    for _ in range(sections):
        r = resistor(1000)
        c = capacitor(1e-9)
        d = diode()
        circuit.connect(tap, r.pin("+"))
        circuit.connect(r.pin("-"), c.pin("+"), d.pin("+"))
        circuit.connect(c.pin("-"), d.pin("-"), "gnd")
        tap = r.pin("-")
    return circuit


def run_benchmark(sections: int, iterations: int, profile: bool) -> None:
    def workload() -> None:
        start = time.perf_counter()
        for _ in range(iterations):
            circuit = build_ladder(sections)
            incidence = circuit.incidence()
            topomat(incidence)
            circuit.nonlinear_eq()
        elapsed = time.perf_counter() - start
        print(f"Sections: {sections}")
        print(f"Iterations: {iterations}")
        print(f"Elapsed: {elapsed:.4f}s")
        print(f"Per circuit: {elapsed / iterations * 1e3:.2f}ms")

    if profile:
        profiler = cProfile.Profile()
        profiler.enable()
        workload()
        profiler.disable()
        stats = pstats.Stats(profiler).strip_dirs().sort_stats("tottime")
        stats.print_stats(20)
    else:
        workload()


def main() -> None:
    parser = argparse.ArgumentParser(description="ctopo topology micro-benchmark")
    parser.add_argument("--sections", type=int, default=50)
    parser.add_argument("--iterations", type=int, default=20)
    parser.add_argument("--profile", action="store_true")
    args = parser.parse_args()
    run_benchmark(args.sections, args.iterations, args.profile)


if __name__ == "__main__":
    main()
