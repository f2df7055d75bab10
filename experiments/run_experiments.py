"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs several headless replications per scenario, and reports mean KPIs.
Running-average wait and work-in-process curves are saved as PNGs so the
scenarios can be compared over the simulated shift.
"""

from __future__ import annotations
import copy, os, math
from typing import Callable, Dict, List, Optional
from statistics import mean

from drivethru.config import ROOT, apply_overrides, load_cfg
from drivethru.logging_config import configure_from_env
from drivethru.simulation import run_one_day

from .scenarios import SCENARIOS

OUTPUT_DIR = os.path.join(ROOT, "experiments", "output")

def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]

def avg_nested(results: List[Dict], key: str) -> Dict[str, float]:
    """Average nested dictionaries (e.g., stage_utilization) across replications."""
    if not results:
        return {}
    totals: Dict[str, float] = {}
    for res in results:
        nested = res.get(key, {})
        for subk, val in nested.items():
            totals[subk] = totals.get(subk, 0.0) + float(val)
    return {subk: totals[subk] / len(results) for subk in totals}

def run_scenario(cfg: Dict, scenario: Dict, replications: int) -> List[Dict]:
    """Run `replications` days of one scenario with consecutive seeds."""
    base = apply_overrides(cfg, scenario["overrides"])
    seed0 = base.get("sim", {}).get("seed", 0)
    results = []
    for rep in range(replications):
        run_cfg = copy.deepcopy(base)
        run_cfg.setdefault("sim", {})["seed"] = seed0 + rep
        results.append(run_one_day(run_cfg))
    return results

def _sample_at(points: List[Dict[str, float]], minute: float, key: str) -> float:
    """Last recorded value at or before `minute` (series are step functions)."""
    val = 0.0
    for pt in points:
        if pt["time_minutes"] > minute:
            break
        val = pt[key]
    return val

def aggregate_time_series(results: List[Dict], day_minutes: float, interval_minutes: float = 5.0) -> List[Dict[str, float]]:
    """
    Average per-replication WIP and running average wait on a common time
    grid so curves from different seeds can be overlaid.
    """
    if not results:
        return []
    steps = int(math.ceil(day_minutes / interval_minutes))
    grid = [i * interval_minutes for i in range(steps + 1)]
    aggregated: List[Dict[str, float]] = []
    for minute in grid:
        wips = [_sample_at(r.get("time_series", []), minute, "wip") for r in results]
        waits = [_sample_at(r.get("time_series", []), minute, "avg_wait") for r in results]
        aggregated.append({"time_minutes": minute, "wip": mean(wips), "avg_wait": mean(waits)})
    return aggregated

def plot_all_scenarios(curves: List[Dict], out_dir: str = OUTPUT_DIR) -> Optional[str]:
    """Plot WIP and running average wait for every scenario on one figure."""
    if not curves:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, (ax_wip, ax_wait) = plt.subplots(2, 1, figsize=(9, 7), sharex=True)
    for entry in curves:
        pts = entry.get("series", [])
        if not pts:
            continue
        x = [pt["time_minutes"] for pt in pts]
        ax_wip.plot(x, [pt["wip"] for pt in pts], linewidth=1.5, label=entry["name"])
        ax_wait.plot(x, [pt["avg_wait"] for pt in pts], linewidth=1.5, label=entry["name"])
    ax_wip.set_ylabel("Cars in system (WIP)")
    ax_wait.set_ylabel("Avg time in system (min)")
    ax_wait.set_xlabel("Time (minutes)")
    ax_wip.set_title("Drive-thru scenarios over the shift")
    for ax in (ax_wip, ax_wait):
        ax.grid(True, linestyle="--", alpha=0.4)
        ax.legend()
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, "all_scenarios_wip_wait.png")
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
    plt.close(fig)
    return out_path

def main():
    """Entry point: drive all scenarios, replications, and report KPIs."""
    configure_from_env()
    cfg = load_cfg()
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", 1)))

    curves = []
    for sc in SCENARIOS:
        results = run_scenario(cfg, sc, replications)
        day_len = apply_overrides(cfg, sc["overrides"])["sim"]["day_minutes"]
        curves.append({"name": sc["name"], "series": aggregate_time_series(results, day_len)})

        served = mean(series(results, lambda r: r["served"]))
        arrivals = mean(series(results, lambda r: r["arrivals"]))
        parked = mean(series(results, lambda r: r["parked"]))
        avg_wait = mean(series(results, lambda r: r["avg_wait_minutes"]))
        p90_wait = mean(series(results, lambda r: r["p90_wait_minutes"]))
        max_wip = mean(series(results, lambda r: r["max_wip"]))
        moves = mean(series(results, lambda r: len(r["rebalances"])))
        utilizations = {k: round(v * 100.0, 1) for k, v in avg_nested(results, "stage_utilization").items()}

        print(f"Scenario: {sc['name']} (replications={replications})")
        print(f"  Arrivals/day: {arrivals:.1f}")
        print(f"  Served/day: {served:.1f}")
        print(f"  Diverted to curbside/day: {parked:.1f}")
        print(f"  Avg time in system: {avg_wait:.2f} min (p90 {p90_wait:.2f} min)")
        print(f"  Max WIP: {max_wip:.1f}")
        print(f"  Server moves/day: {moves:.1f}")
        print(f"  Stage utilization (mean % busy): {utilizations}")
        print("-")

    if exp_cfg.get("plot", True):
        path = plot_all_scenarios(curves)
        if path:
            print(f"\nAll-scenario WIP/wait plot saved to: {path}")

if __name__ == "__main__":
    main()
