# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Fixed-step simulation engine for the drive-thru: owns the simulated
#   clock, the stage queues and the parking lot, and runs one step at a
#   time: arrivals -> stage service -> curbside pickups -> metrics ->
#   optional server rebalance -> snapshot.
#
# Design notes:
#   - An external scheduler (UI timer, test loop) calls tick() on a fixed
#     cadence; tick() only advances time while the engine is RUNNING.
#   - All randomness comes from one random.Random owned by the engine.
#   - A step never re-enters itself; subscribers see completed steps only.
#
# Usage:
#   from drivethru.simulation import Simulation, run_one_day
#   sim = Simulation(cfg); sim.start(); sim.tick()
#   results = run_one_day(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import enum, logging, math, random
from typing import Any, Callable, Dict, List, Optional

from .analytic import advisory_eta
from .arrivals import ArrivalProcess
from .config import DEFAULT_CONFIG, Parameters, apply_overrides, clamp_parameters
from .network import Router, SimContext
from .parking import generate_spots
from .policies import rebalance_servers
from .stations import make_stages

logger = logging.getLogger(__name__)

class SimState(str, enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    RESET_PENDING = "reset_pending"

Snapshot = Dict[str, Any]

class Simulation:
    """Drive-thru engine.

    Parameters
    ----------
    cfg : dict, optional
        Config (see config/baseline.yaml); merged over DEFAULT_CONFIG.
    seed : int, optional
        Overrides cfg["sim"]["seed"].
    rng : random.Random, optional
        Explicit generator; takes precedence over `seed`.
    interarrival : callable, optional
        Replaces exponential interarrival draws (see ArrivalProcess).
    """
    def __init__(self, cfg: Optional[Dict] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 interarrival: Optional[Callable[[], float]] = None):
        self.cfg = apply_overrides(DEFAULT_CONFIG, cfg or {})
        sim_cfg = self.cfg["sim"]
        if rng is None:
            rng = random.Random(sim_cfg.get("seed", 0) if seed is None else seed)
        self.rng = rng
        self.dt = float(sim_cfg.get("minutes_per_tick", 0.08))
        reb = self.cfg.get("rebalance", {})
        self.rebalance_probability = float(reb.get("probability", 0.05))
        self.rebalance_cooldown = float(reb.get("cooldown_minutes", 0.0))
        self.rebalance_epsilon = float(reb.get("epsilon", 1e-6))

        self.state = SimState.STOPPED
        self.router = Router(self.cfg)
        self.arrivals = ArrivalProcess(self.rng, interarrival)
        self.ctx = SimContext(
            params=Parameters.from_cfg(self.cfg),
            stages=make_stages(),
            spots=[],
        )
        self._subscribers: List[Callable[[Snapshot], None]] = []
        self._in_step = False
        self._last_rebalance = -math.inf
        self._initialize()

    # -- convenience accessors -------------------------------------------------
    @property
    def params(self) -> Parameters:
        return self.ctx.params

    @property
    def clock(self) -> float:
        return self.ctx.clock

    @property
    def metrics(self):
        return self.ctx.metrics

    # -- commands --------------------------------------------------------------
    def start(self):
        if self.state is not SimState.RUNNING:
            self.state = SimState.RUNNING
            logger.info("simulation started at t=%.2f", self.clock)

    def pause(self):
        if self.state is SimState.RUNNING:
            self.state = SimState.STOPPED
            logger.info("simulation paused at t=%.2f", self.clock)

    def reset(self):
        """Clear queues, metrics and clocks, rebuild the lot, and stop."""
        self.state = SimState.RESET_PENDING
        self._initialize()
        self.state = SimState.STOPPED
        logger.info("simulation reset")

    def update_parameters(self, partial: Dict[str, Any], clamp: bool = False) -> Parameters:
        """Merge a partial parameter set; the new values apply from the next step."""
        params = self.ctx.params.merged(partial)
        if clamp:
            params = clamp_parameters(params)
        self.ctx.params = params
        logger.debug("parameters updated: %s", partial)
        return params

    def subscribe(self, callback: Callable[[Snapshot], None]):
        self._subscribers.append(callback)

    # -- stepping --------------------------------------------------------------
    def tick(self) -> Optional[Snapshot]:
        """Scheduler entry point: one fixed step while running, else nothing."""
        if self.state is not SimState.RUNNING:
            return None
        return self.step(self.dt)

    def step(self, dt: Optional[float] = None) -> Snapshot:
        if self._in_step:
            raise RuntimeError("Simulation.step() is not re-entrant")
        self._in_step = True
        try:
            self._step(self.dt if dt is None else dt)
            snap = self.snapshot()
            for cb in self._subscribers:
                cb(snap)
        finally:
            self._in_step = False
        return snap

    def _step(self, dt: float):
        ctx, params = self.ctx, self.ctx.params
        ctx.clock += dt

        # Arrivals
        for _ in self.arrivals.due(dt, params.arrival_rate):
            self.router.on_arrival(ctx, self.arrivals.is_mobile(params.mobile_share))

        # Stage service, upstream first
        for stage_id, stage in ctx.stages.items():
            car = stage.advance(dt, params.rate(stage_id), params.servers(stage_id))
            if car is not None:
                self.router.advance(ctx, car, stage_id)

        # Curbside pickups
        self.router.serve_curbside(ctx, self.rng)

        ctx.metrics.record_tick(ctx.clock, ctx.wip())

        if params.auto_rebalance:
            self._maybe_rebalance()

    def _maybe_rebalance(self):
        if self.rng.random() >= self.rebalance_probability:
            return
        if self.clock - self._last_rebalance < self.rebalance_cooldown:
            return
        move = rebalance_servers(self.ctx.queue_view(), self.ctx.params, self.rebalance_epsilon)
        if move is None:
            return
        self._last_rebalance = self.clock
        self.ctx.metrics.note_rebalance(self.clock, move.donor.value, move.recipient.value)
        logger.info("t=%.2f moved one server %s -> %s", self.clock, move.donor.value, move.recipient.value)

    def run_until(self, t_end: float) -> Snapshot:
        """Headless run: step until the clock reaches t_end, regardless of state."""
        snap = self.snapshot()
        while self.clock < t_end:
            snap = self.step(min(self.dt, t_end - self.clock))
        return snap

    # -- state -----------------------------------------------------------------
    def _initialize(self):
        ctx = self.ctx
        for stage in ctx.stages.values():
            stage.reset()
        ctx.curbside.clear()
        ctx.spots = generate_spots(self.cfg, self.rng)
        ctx.metrics = type(ctx.metrics)()
        ctx.clock = 0.0
        self.router.reset_ids()
        self.arrivals.seed(ctx.params.arrival_rate)
        self._last_rebalance = -math.inf

    def snapshot(self) -> Snapshot:
        """Read-only, JSON-friendly view of the current state."""
        ctx = self.ctx
        queues = {name: [car.to_dict() for car in q] for name, q in ctx.queue_view().items()}
        return {
            "clock_minutes": ctx.clock,
            "state": self.state.value,
            "parameters": ctx.params.as_dict(),
            "queues": queues,
            "spots": [s.to_dict() for s in ctx.spots],
            "metrics": ctx.metrics.summary(ctx.clock, ctx.stages, with_series=False),
            "advisory": advisory_eta(ctx.queue_view(), ctx.params),
        }

def run_one_day(cfg: Dict, interarrival: Optional[Callable[[], float]] = None) -> Dict:
    """Run cfg['sim']['day_minutes'] headless and return the metrics summary."""
    sim = Simulation(cfg, interarrival=interarrival)
    sim.run_until(float(sim.cfg["sim"].get("day_minutes", 240.0)))
    out = sim.metrics.summary(sim.clock, sim.ctx.stages)
    out["parameters"] = sim.params.as_dict()
    return out
