# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize KPIs: arrivals, served, parked, running average
#   time in system, work-in-process, stage utilization and rebalance moves.
#
# Design notes:
#   - Keep side-effect methods (note_*) for instrumentation from the engine.
#   - The average wait is maintained online; count and mean are updated
#     together by RunningMean.add so they can never drift apart.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(); M.summary(clock, stages)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Any, Dict, List, Optional

class RunningMean:
    """Online mean: mean += (x - mean) / n."""
    __slots__ = ("count", "mean")

    def __init__(self):
        self.count = 0
        self.mean = 0.0

    def add(self, sample: float) -> float:
        self.count += 1
        self.mean += (sample - self.mean) / self.count
        return self.mean

class Metrics:
    def __init__(self):
        self.arrivals = 0
        self.parked = 0
        self.wait = RunningMean()
        self.wait_samples: List[float] = []  # raw time-in-system samples for percentiles
        self.max_wip = 0
        self.wip = 0
        self.rebalances: List[Dict[str, Any]] = []
        self.time_series: List[Dict[str, float]] = []

    @property
    def served(self) -> int:
        return self.wait.count

    @property
    def avg_wait(self) -> float:
        return self.wait.mean

    def note_arrival(self, vehicle, t: float):
        self.arrivals += 1

    def note_parked(self, vehicle, t: float):
        self.parked += 1

    def note_served(self, vehicle, t: float):
        sample = vehicle.wait(t)
        self.wait_samples.append(sample)
        self.wait.add(sample)

    def note_rebalance(self, t: float, donor: str, recipient: str):
        self.rebalances.append({"time_minutes": t, "from": donor, "to": recipient})

    def record_tick(self, t: float, wip: int):
        """Fold in end-of-step WIP and append one time-series point."""
        self.wip = wip
        self.max_wip = max(self.max_wip, wip)
        self.time_series.append({"time_minutes": t, "wip": wip, "avg_wait": self.wait.mean})

    def p90_wait(self) -> float:
        if not self.wait_samples:
            return 0.0
        waits = sorted(self.wait_samples)
        idx = int(math.ceil(0.9 * len(waits))) - 1
        idx = max(0, min(idx, len(waits) - 1))
        return waits[idx]

    def summary(self, clock: float = 0.0, stages: Optional[Dict[Any, Any]] = None,
                with_series: bool = True) -> Dict:
        stage_utilization: Dict[str, float] = {}
        for stage in (stages or {}).values():
            busy = getattr(stage, "busy_time", 0.0)
            stage_utilization[stage.name] = busy / clock if clock > 0 else 0.0
        out = {
            "arrivals": self.arrivals,
            "served": self.served,
            "parked": self.parked,
            "avg_wait_minutes": self.avg_wait,
            "p90_wait_minutes": self.p90_wait(),
            "wip": self.wip,
            "max_wip": self.max_wip,
            "stage_utilization": stage_utilization,
            "rebalances": list(self.rebalances),
        }
        if with_series:
            out["time_series"] = list(self.time_series)
        return out
