# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# analytic.py
# -----------------------------------------------------------------------------
# Purpose:
#   Closed-form M/M/s estimates (Erlang C) used for the advisory ETA shown
#   next to the live simulation.
#
# Design notes:
#   - Pure functions; unstable or degenerate inputs return the sentinels
#     (probability 1, wait = inf) instead of raising.
#   - Routing uses the cheaper ratio predictor in policies.py, not this.
#
# Usage:
#   from drivethru.analytic import erlang_c, expected_wait_minutes
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Dict, Mapping, Sequence

from .config import Parameters, StageId

def erlang_c(lam: float, mu: float, s: int) -> float:
    """
    Probability that an arrival finds all `s` servers busy in an M/M/s queue.

    Parameters
    ----------
    lam : float
        Arrival intensity (per minute).
    mu : float
        Service rate per server (per minute).
    s : int
        Number of servers.
    """
    if s <= 0 or mu <= 0:
        return 1.0
    rho = lam / (s * mu)
    if rho >= 1:
        return 1.0
    a = lam / mu  # offered load
    # Erlang-B by recursion, then convert; stays in float range for any s
    b = 1.0
    for k in range(1, s + 1):
        b = a * b / (k + a * b)
    return b / (1 - rho * (1 - b))

def expected_wait_minutes(lam: float, mu: float, s: int) -> float:
    """Mean queueing delay Wq = C / (s*mu - lam); inf when unstable."""
    if s <= 0 or mu <= 0:
        return math.inf
    if lam / (s * mu) >= 1:
        return math.inf
    return erlang_c(lam, mu, s) / (s * mu - lam)

def advisory_eta(queues: Mapping[str, Sequence], params: Parameters) -> Dict[str, object]:
    """
    Per-lane ETA for display, plus a one-line recommendation.

    Each stage's queue length + 1 stands in for the arrival intensity, so an
    empty stage still reports the wait an extra car would see.
    """
    def _stage(key: str, stage: StageId) -> float:
        return expected_wait_minutes(len(queues[key]) + 1, params.rate(stage), params.servers(stage))

    pay = _stage("pay", StageId.PAY)
    pickup = _stage("pickup", StageId.PICKUP)
    eta_a = _stage("order_a", StageId.ORDER_A) + pay + pickup
    eta_b = _stage("order_b", StageId.ORDER_B) + pay + pickup
    if min(eta_a, eta_b) > params.divert_threshold:
        advice = "Divert to curbside"
    else:
        advice = f"Use lane {'A' if eta_a < eta_b else 'B'}"
    return {"eta_a": eta_a, "eta_b": eta_b, "advice": advice}
