"""Timing for the normalize/parse/evaluate pipeline, cold and cached."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from mathcore import ExpressionEngine
from _bench_utils import (
    configure_cpu_affinity_from_env,
    host_metadata,
    mean as _mean,
    percentile as _percentile,
    sample_ms,
    stddev as _stddev,
)

PROFILE_PRESETS: dict[str, dict[str, int]] = {
    "quick": {"samples": 3, "warmup": 1, "repeats": 50},
    "full": {"samples": 7, "warmup": 3, "repeats": 400},
}

DEFINITIONS = ("a = 2", "f(x) = x^2 + a", "L = [1, 2, 3, 4, 5, 6, 7, 8]")


@dataclass(frozen=True)
class Case:
    name: str
    expression: str
    note: str


@dataclass(frozen=True)
class Row:
    name: str
    stage: str
    note: str
    mean_ms: float
    stdev_ms: float
    p50_ms: float
    p95_ms: float


CASES = (
    Case("arithmetic", "2+3*4-5/6", "flat precedence climbing"),
    Case("latex_fraction", "\\frac{1}{2}x + \\sin(\\theta)", "normalizer rewrites dominate"),
    Case("user_function", "f(3) + f(a)", "context function application"),
    Case("derivative", "D(sin(x)*x^2)", "symbolic differentiation"),
    Case("fft", "magnitude(fft(L))", "jax.numpy FFT round trip"),
    Case("integral", "integrate(x^2, 0, 3)", "adaptive Simpson with evaluator callbacks"),
)


def _row(name: str, stage: str, note: str, timings: list[float]) -> Row:
    return Row(
        name=name,
        stage=stage,
        note=note,
        mean_ms=_mean(timings),
        stdev_ms=_stddev(timings),
        p50_ms=_percentile(timings, 0.5),
        p95_ms=_percentile(timings, 0.95),
    )


def run(profile: str) -> dict[str, object]:
    affinity = configure_cpu_affinity_from_env()
    preset = PROFILE_PRESETS[profile]
    engine = ExpressionEngine()
    context = engine.build_context(DEFINITIONS)
    rows: list[Row] = []
    for case in CASES:

        def cold() -> object:
            engine.clear_cache()
            return engine.evaluate_expression(case.expression, {"theta": 0.5}, context)

        def warm() -> object:
            return engine.evaluate_expression(case.expression, {"theta": 0.5}, context)

        for stage, fn in (("cold", cold), ("cached", warm)):
            timings = sample_ms(fn, repeats=preset["repeats"], warmup=preset["warmup"], samples=preset["samples"])
            rows.append(_row(case.name, stage, case.note, timings))
    return {
        "generated_at": datetime.now(UTC).isoformat(),
        "profile": profile,
        "host": host_metadata(),
        "affinity": affinity,
        "cache": engine.cache_info(),
        "rows": [asdict(row) for row in rows],
    }


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--profile", choices=sorted(PROFILE_PRESETS), default="quick")
    parser.add_argument("--json-out", default=None, help="optional path for machine-readable results")
    args = parser.parse_args()

    report = run(args.profile)
    print(f"{'case':<16} {'stage':<7} {'mean ms':>10} {'p95 ms':>10}")
    for row in report["rows"]:  # type: ignore[union-attr]
        print(f"{row['name']:<16} {row['stage']:<7} {row['mean_ms']:>10.4f} {row['p95_ms']:>10.4f}")
    if args.json_out:
        out = Path(args.json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
