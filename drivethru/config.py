# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML configuration, merge scenario overrides, and expose the
#   mutable per-tick Parameters read by the engine every step.
#
# Design notes:
#   - DEFAULT_CONFIG mirrors config/baseline.yaml so the engine runs without
#     a file; YAML values are merged on top with apply_overrides.
#   - Parameters is the only part of the config the UI may change mid-run.
#   - Stage server counts are addressed through StageId rather than
#     separate accessors per stage.
#
# Usage:
#   cfg = load_cfg("config/baseline.yaml")
#   params = Parameters.from_cfg(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, enum, os, yaml
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

SERVER_FLOOR = 1

DEFAULT_CONFIG: Dict[str, Any] = {
    "arrivals": {"rate_per_hour": 36.0, "mobile_share": 0.35},
    "routing": {"divert_threshold_minutes": 7.0, "mobile_factor": 0.55},
    "service_rates": {"order": 0.8, "pay": 1.3, "pickup": 1.0},
    "capacities": {"order_a": 1, "order_b": 1, "pay": 1, "pickup": 1},
    "rebalance": {"auto": True, "probability": 0.05, "cooldown_minutes": 0.0, "epsilon": 1e-6},
    "curbside": {"ready_minutes": [4.0, 10.0]},
    "parking": {
        "rows": 4,
        "cols": 14,
        "origin": [6.0, 60.0],
        "spacing": [6.0, 8.0],
        "entrance": [6.0, 70.0],
        "occupied_share": 0.2,
        "reserved_rows": 1,
        "reserved_cols": 2,
        "back_in_share": 0.25,
        "congestion_max": 0.6,
        "weights": {"dist": 1.0, "exit": 0.6, "cong": 0.8, "angle": 0.2},
        "back_in_penalty": 0.7,
    },
    "sim": {"minutes_per_tick": 0.08, "tick_ms": 120, "day_minutes": 240.0, "seed": 0},
    "experiments": {"replications": 5, "plot": True},
}

class StageId(str, enum.Enum):
    ORDER_A = "order_a"
    ORDER_B = "order_b"
    PAY = "pay"
    PICKUP = "pickup"

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply overrides (recursive merge) on top of a base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides or {})
    return new

def load_cfg(path: Optional[str] = None) -> Dict:
    """Read a YAML config and merge it on top of DEFAULT_CONFIG.

    With no path, config/baseline.yaml under the project root is used when
    present; otherwise the defaults are returned as-is.
    """
    if path is None:
        path = os.path.join(ROOT, "config", "baseline.yaml")
        if not os.path.exists(path):
            return copy.deepcopy(DEFAULT_CONFIG)
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    return apply_overrides(DEFAULT_CONFIG, raw)

@dataclass
class Parameters:
    """Process-wide knobs read by the engine on every tick.

    Rates are per server per minute, except `arrival_rate` which is per hour.
    """
    arrival_rate: float = 36.0
    mobile_share: float = 0.35
    divert_threshold: float = 7.0
    order_rate: float = 0.8
    pay_rate: float = 1.3
    pickup_rate: float = 1.0
    order_servers_a: int = 1
    order_servers_b: int = 1
    pay_servers: int = 1
    pickup_servers: int = 1
    auto_rebalance: bool = True

    @classmethod
    def from_cfg(cls, cfg: Dict) -> "Parameters":
        arr = cfg.get("arrivals", {})
        rates = cfg.get("service_rates", {})
        caps = cfg.get("capacities", {})
        return cls(
            arrival_rate=float(arr.get("rate_per_hour", cls.arrival_rate)),
            mobile_share=float(arr.get("mobile_share", cls.mobile_share)),
            divert_threshold=float(cfg.get("routing", {}).get("divert_threshold_minutes", cls.divert_threshold)),
            order_rate=float(rates.get("order", cls.order_rate)),
            pay_rate=float(rates.get("pay", cls.pay_rate)),
            pickup_rate=float(rates.get("pickup", cls.pickup_rate)),
            order_servers_a=int(caps.get("order_a", cls.order_servers_a)),
            order_servers_b=int(caps.get("order_b", cls.order_servers_b)),
            pay_servers=int(caps.get("pay", cls.pay_servers)),
            pickup_servers=int(caps.get("pickup", cls.pickup_servers)),
            auto_rebalance=bool(cfg.get("rebalance", {}).get("auto", cls.auto_rebalance)),
        )

    def merged(self, partial: Dict[str, Any]) -> "Parameters":
        """Return a copy with `partial` applied; unknown names are rejected."""
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        return replace(self, **partial)

    # Stage lookup: StageId -> (server count attribute, service rate attribute)
    _STAGE_FIELDS = {
        StageId.ORDER_A: ("order_servers_a", "order_rate"),
        StageId.ORDER_B: ("order_servers_b", "order_rate"),
        StageId.PAY: ("pay_servers", "pay_rate"),
        StageId.PICKUP: ("pickup_servers", "pickup_rate"),
    }

    def servers(self, stage: StageId) -> int:
        return getattr(self, self._STAGE_FIELDS[StageId(stage)][0])

    def set_servers(self, stage: StageId, count: int):
        setattr(self, self._STAGE_FIELDS[StageId(stage)][0], int(count))

    def rate(self, stage: StageId) -> float:
        return getattr(self, self._STAGE_FIELDS[StageId(stage)][1])

    def total_servers(self) -> int:
        return sum(self.servers(s) for s in StageId)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

# Input ranges enforced by the UI controls
PARAMETER_BOUNDS = {
    "arrival_rate": (1.0, 120.0),
    "mobile_share": (0.0, 1.0),
    "divert_threshold": (2.0, 20.0),
    "order_rate": (0.2, 2.0),
    "pay_rate": (0.2, 3.0),
    "pickup_rate": (0.2, 3.0),
    "order_servers_a": (1, 3),
    "order_servers_b": (1, 3),
    "pay_servers": (1, 3),
    "pickup_servers": (1, 3),
}

def clamp_parameters(params: Parameters) -> Parameters:
    """Clamp every bounded field into its control range (server counts are rounded)."""
    updates: Dict[str, Any] = {}
    for name, (lo, hi) in PARAMETER_BOUNDS.items():
        val = getattr(params, name)
        if isinstance(lo, int):
            val = int(round(val))
        updates[name] = min(max(val, lo), hi)
    return replace(params, **updates)
