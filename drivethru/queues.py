# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Fixed-step service primitive: a Stage with a FIFO queue and a
#   service-completion clock that counts down faster with more servers.
#
# Design notes:
#   - One completion per stage per step; the clock is reset to the mean
#     service time 1/rate after every completion.
#   - An idle (or unstaffed) stage cannot bank negative time: its clock is
#     held at >= 1/rate until work shows up.
#   - rate <= 0 means the stage never completes work (service time = inf).
#     The infinite clock is dropped as soon as a usable rate comes back.
#
# Usage:
#   from drivethru.queues import Stage
#   done = stage.advance(dt, rate, servers)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Any, List, Optional

def service_time(rate: float) -> float:
    return 1.0 / rate if rate > 0 else math.inf

class Stage:
    """FIFO stage with a countdown clock.

    Parameters
    ----------
    name : str
        Stage name, also the key used in snapshots and progress stamps.

    Attributes
    ----------
    queue : list
        Waiting vehicles; the head is the one being served.
    clock : float
        Remaining work (minutes at one server) before the head completes.
    busy_time : float
        Simulated minutes during which the stage had work and staff.
    """
    def __init__(self, name: str):
        self.name = name
        self.queue: List[Any] = []
        self.clock: float = 0.0
        self.busy_time: float = 0.0
        self.completions: int = 0

    def __len__(self) -> int:
        return len(self.queue)

    def enqueue(self, job: Any):
        self.queue.append(job)

    def advance(self, dt: float, rate: float, servers: int) -> Optional[Any]:
        """Run the stage for `dt` minutes; return the job that completed, if any."""
        svc = service_time(rate)
        if math.isinf(self.clock) and not math.isinf(svc):
            self.clock = svc
        if self.queue and servers > 0:
            self.busy_time += dt
            self.clock -= dt * servers
            if self.clock <= 0:
                job = self.queue.pop(0)
                self.clock = svc
                self.completions += 1
                return job
        else:
            self.clock = max(self.clock, svc)
        return None

    def reset(self):
        self.queue.clear()
        self.clock = 0.0
        self.busy_time = 0.0
        self.completions = 0
