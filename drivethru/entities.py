# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definitions for the drive-thru model: Vehicle and ParkingSpot.
#   These objects carry attributes needed for routing, timing, and policies.
#
# Design notes:
#   - A Vehicle lives in exactly one stage queue at a time (order lane, pay,
#     pickup, or curbside) until it is served.
#   - ParkingSpots are created once per run; only `occupied` ever toggles.
#
# Usage:
#   from drivethru.entities import Vehicle, ParkingSpot
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional

@dataclass
class Vehicle:
    vid: str
    arrival_time: float              # simulated minutes
    is_mobile: bool = False
    lane: Optional[str] = None       # 'A' | 'B' | None when diverted
    progress: Dict[str, float] = field(default_factory=dict)   # stage -> completion time
    spot_id: Optional[str] = None    # set when routed to curbside
    ready_at: Optional[float] = None # curbside ready time, drawn lazily
    t_served: Optional[float] = None

    @property
    def curbside(self) -> bool:
        return self.spot_id is not None

    def wait(self, now: float) -> float:
        """Time in system so far (or total, once served)."""
        end = self.t_served if self.t_served is not None else now
        return max(end - self.arrival_time, 0.0)

    def to_dict(self) -> dict:
        return asdict(self)

@dataclass
class ParkingSpot:
    sid: str
    x: float
    y: float
    occupied: bool = False
    reserved: bool = False
    exit_friction: float = 0.0
    local_congestion: float = 0.0
    back_in: bool = False

    @property
    def available(self) -> bool:
        return not (self.occupied or self.reserved)

    def to_dict(self) -> dict:
        return asdict(self)
