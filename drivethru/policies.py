# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Operational policies: which order lane a new car should join, and which
#   stage should give up a server to relieve the current bottleneck.
#
# Design notes:
#   - Keep pure functions to ease testing (state -> decision). The only
#     mutation is rebalance_servers() moving one server inside Parameters.
#   - Predicted delays use a queue/capacity ratio; inf marks a stage that
#     cannot serve (rate or servers <= 0) and always loses a comparison.
#
# Usage:
#   from drivethru.policies import choose_best_lane, rebalance_servers
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .config import Parameters, StageId, SERVER_FLOOR

LANES = ("A", "B")
LANE_STAGES = {"A": StageId.ORDER_A, "B": StageId.ORDER_B}
DEFAULT_MOBILE_FACTOR = 0.55

class LaneChoice(NamedTuple):
    lane: str
    eta: float

class Move(NamedTuple):
    donor: StageId
    recipient: StageId

def predicted_queue_time(q: int, rate: float, servers: int) -> float:
    if rate <= 0 or servers <= 0:
        return math.inf
    return q / (rate * servers)

def lane_eta(queues: Mapping[str, Sequence], params: Parameters, lane: str,
             is_mobile: bool = False, mobile_factor: float = DEFAULT_MOBILE_FACTOR) -> float:
    """Predicted order + pay + pickup delay for a car joining `lane` now."""
    stage = LANE_STAGES[lane]
    t_order = predicted_queue_time(len(queues[stage.value]), params.order_rate, params.servers(stage))
    t_pay = predicted_queue_time(len(queues["pay"]), params.pay_rate, params.pay_servers)
    t_pickup = predicted_queue_time(len(queues["pickup"]), params.pickup_rate, params.pickup_servers)
    if is_mobile and math.isfinite(t_order):
        # inf * 0 would be nan and lose every comparison
        t_order *= mobile_factor
    return t_order + t_pay + t_pickup

def choose_best_lane(queues: Mapping[str, Sequence], params: Parameters,
                     is_mobile: bool = False, mobile_factor: float = DEFAULT_MOBILE_FACTOR) -> LaneChoice:
    """
    Pick the order lane with the lowest predicted total delay.

    Ties go to the first lane in LANES. When every lane is infinite the first
    lane is still returned, with eta = inf.
    """
    best, best_eta = LANES[0], math.inf
    for lane in LANES:
        eta = lane_eta(queues, params, lane, is_mobile, mobile_factor)
        if eta < best_eta:
            best, best_eta = lane, eta
    return LaneChoice(best, best_eta)

def stage_pressure(queues: Mapping[str, Sequence], params: Parameters,
                   epsilon: float = 1e-6) -> Dict[StageId, float]:
    """Queue length over service capacity for each stage (order lanes separately)."""
    pressure: Dict[StageId, float] = {}
    for stage in StageId:
        denom = params.rate(stage) * params.servers(stage) + epsilon
        q = len(queues[stage.value])
        pressure[stage] = q / denom if denom > 0 else math.inf
    return pressure

def rebalance_servers(queues: Mapping[str, Sequence], params: Parameters,
                      epsilon: float = 1e-6) -> Optional[Move]:
    """
    Move one server from the least-pressured stage that can spare it to the
    most-pressured stage. Returns the move, or None when every other stage
    is already at SERVER_FLOOR. Total servers are unchanged either way.
    """
    pressure = stage_pressure(queues, params, epsilon)
    # sorted() is stable: equal pressures keep StageId order
    ranked: List[Tuple[StageId, float]] = sorted(pressure.items(), key=lambda kv: kv[1], reverse=True)
    hottest = ranked[0][0]
    for stage, _ in reversed(ranked):
        if stage is hottest:
            continue
        count = params.servers(stage)
        if count > SERVER_FLOOR:
            params.set_servers(stage, count - 1)
            params.set_servers(hottest, params.servers(hottest) + 1)
            return Move(stage, hottest)
    return None
