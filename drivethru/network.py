# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Router and network wiring. Decides where a car goes on arrival (order
#   lane A/B or curbside parking) and where it goes after each completion.
#
# Design notes:
#   - The router owns no state of its own beyond an id counter; it reads and
#     mutates the SimContext handed to it by the engine.
#   - Curbside diversion is best-effort: with no free spot the car joins
#     the predicted-better lane even though its ETA is over the threshold.
#
# Usage:
#   router = Router(cfg)
#   router.on_arrival(ctx, is_mobile=False)
# -----------------------------------------------------------------------------

from __future__ import annotations
import itertools, logging
from dataclasses import dataclass, field
from typing import Dict, List

from .config import Parameters, StageId
from .entities import ParkingSpot, Vehicle
from .metrics import Metrics
from .parking import DEFAULT_BACK_IN_PENALTY, DEFAULT_WEIGHTS, release_spot, select_spot
from .policies import DEFAULT_MOBILE_FACTOR, LANE_STAGES, choose_best_lane
from .queues import Stage
from .stations import NEXT_STAGE

logger = logging.getLogger(__name__)

@dataclass
class SimContext:
    """Everything a step mutates, passed by handle to router and policies."""
    params: Parameters
    stages: Dict[StageId, Stage]
    spots: List[ParkingSpot]
    metrics: Metrics = field(default_factory=Metrics)
    curbside: List[Vehicle] = field(default_factory=list)
    clock: float = 0.0

    def queue_view(self) -> Dict[str, List[Vehicle]]:
        """Stage name -> queue, plus 'curbside'."""
        view = {stage.value: st.queue for stage, st in self.stages.items()}
        view["curbside"] = self.curbside
        return view

    def wip(self) -> int:
        return sum(len(st) for st in self.stages.values()) + len(self.curbside)

class Router:
    def __init__(self, cfg: dict):
        routing = cfg.get("routing", {})
        parking = cfg.get("parking", {})
        self.mobile_factor = float(routing.get("mobile_factor", DEFAULT_MOBILE_FACTOR))
        self.entrance = tuple(parking.get("entrance", (6.0, 70.0)))
        self.weights = {**DEFAULT_WEIGHTS, **parking.get("weights", {})}
        self.back_in_penalty = float(parking.get("back_in_penalty", DEFAULT_BACK_IN_PENALTY))
        lo, hi = cfg.get("curbside", {}).get("ready_minutes", (4.0, 10.0))
        self.ready_bounds = (float(lo), float(hi))
        self._ids = itertools.count(1)

    def reset_ids(self):
        self._ids = itertools.count(1)

    # Incoming arrivals
    def on_arrival(self, ctx: SimContext, is_mobile: bool) -> Vehicle:
        car = Vehicle(vid=f"V{next(self._ids)}", arrival_time=ctx.clock, is_mobile=is_mobile)
        ctx.metrics.note_arrival(car, ctx.clock)
        choice = choose_best_lane(ctx.queue_view(), ctx.params, is_mobile, self.mobile_factor)
        if choice.eta > ctx.params.divert_threshold and self._divert(ctx, car):
            return car
        car.lane = choice.lane
        ctx.stages[LANE_STAGES[choice.lane]].enqueue(car)
        return car

    def _divert(self, ctx: SimContext, car: Vehicle) -> bool:
        spot = select_spot(ctx.spots, self.entrance, self.weights, self.back_in_penalty)
        if spot is None:
            logger.debug("t=%.2f no free spot for %s, joining lane anyway", ctx.clock, car.vid)
            return False
        spot.occupied = True
        car.spot_id = spot.sid
        ctx.curbside.append(car)
        ctx.metrics.note_parked(car, ctx.clock)
        logger.debug("t=%.2f %s diverted to spot %s", ctx.clock, car.vid, spot.sid)
        return True

    # Advance after a stage completion
    def advance(self, ctx: SimContext, car: Vehicle, from_stage: StageId):
        car.progress[from_stage.value] = ctx.clock
        nxt = NEXT_STAGE[from_stage]
        if nxt is None:
            self._served(ctx, car)
        else:
            ctx.stages[nxt].enqueue(car)

    def serve_curbside(self, ctx: SimContext, rng) -> int:
        """Complete every parked car whose order is ready; returns how many left."""
        done = 0
        for car in list(ctx.curbside):
            if car.ready_at is None:
                car.ready_at = car.arrival_time + rng.uniform(*self.ready_bounds)
            if ctx.clock >= car.ready_at:
                release_spot(ctx.spots, car.spot_id)
                ctx.curbside.remove(car)
                car.progress["curbside"] = ctx.clock
                self._served(ctx, car)
                done += 1
        return done

    def _served(self, ctx: SimContext, car: Vehicle):
        car.t_served = ctx.clock
        ctx.metrics.note_served(car, ctx.clock)
