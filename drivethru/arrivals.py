# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous car arrivals for a fixed-step clock: a countdown to the
#   next arrival, refilled from exponential interarrival draws.
#
# Design notes:
#   - A step may release several cars; draining the countdown until it is
#     positive again yields a Poisson number of arrivals per step.
#   - `interarrival` can replace the exponential draw (fixed gaps, replayed
#     traces) without touching the engine.
#
# Usage:
#   proc = ArrivalProcess(rng)
#   for _ in proc.due(dt, rate_per_hour):
#       admit_one()
# -----------------------------------------------------------------------------

from __future__ import annotations
import math, random
from typing import Callable, Optional

def exp_gap(rng: random.Random, rate_per_min: float) -> float:
    """Exponential interarrival time (minutes); inf when the rate is not positive."""
    if rate_per_min <= 0:
        return math.inf
    return rng.expovariate(rate_per_min)

class ArrivalProcess:
    """Countdown-driven arrival source.

    Parameters
    ----------
    rng : random.Random
        Generator used for interarrival and mobile-flag draws.
    interarrival : callable, optional
        Zero-argument callable returning the next gap in minutes. When
        omitted, gaps are exponential with the current arrival rate.
    """
    def __init__(self, rng: random.Random, interarrival: Optional[Callable[[], float]] = None):
        self.rng = rng
        self.interarrival = interarrival
        self.countdown: float = math.inf

    def draw(self, rate_per_hour: float) -> float:
        if self.interarrival is not None:
            return float(self.interarrival())
        return exp_gap(self.rng, rate_per_hour / 60.0)

    def seed(self, rate_per_hour: float):
        """Start a fresh countdown (run start or reset)."""
        self.countdown = self.draw(rate_per_hour)

    def due(self, dt: float, rate_per_hour: float):
        """
        Advance the countdown by `dt` and yield once per arrival released.

        The next gap is drawn after each arrival, so a parameter change made
        mid-run takes effect from the next gap on.
        """
        if math.isinf(self.countdown):
            # rate was zero when the countdown was last drawn
            self.countdown = self.draw(rate_per_hour)
        self.countdown -= dt
        while self.countdown <= 0:
            yield
            gap = self.draw(rate_per_hour)
            if gap <= 0:
                raise ValueError(f"interarrival gap must be positive, got {gap}")
            self.countdown += gap

    def is_mobile(self, mobile_share: float) -> bool:
        return self.rng.random() < mobile_share
