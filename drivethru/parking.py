# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# parking.py
# -----------------------------------------------------------------------------
# Purpose:
#   Curbside parking inventory: build the spot grid for a run and pick the
#   best free spot for a diverted vehicle.
#
# Design notes:
#   - select_spot never mutates; the router marks the returned spot occupied.
#   - Scores are a weighted sum of distance from the entrance, exit friction,
#     local congestion and a back-in penalty; lowest score wins, first spot
#     on ties.
#
# Usage:
#   spots = generate_spots(cfg, rng)
#   spot = select_spot(spots, entrance=(6, 70), weights=cfg["parking"]["weights"])
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging, math, random
from typing import Dict, List, Optional, Sequence, Tuple

from .entities import ParkingSpot

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {"dist": 1.0, "exit": 0.6, "cong": 0.8, "angle": 0.2}
DEFAULT_BACK_IN_PENALTY = 0.7

def generate_spots(cfg: dict, rng: random.Random) -> List[ParkingSpot]:
    """
    Lay out `rows x cols` spots on a regular grid.

    Spots in the reserved block (first `reserved_rows` rows, first
    `reserved_cols` columns) are never assignable. A random share starts out
    occupied by cars that are not part of the model, and congestion/back-in
    attributes are drawn from `rng`.
    """
    pk = cfg.get("parking", {})
    rows = int(pk.get("rows", 4))
    cols = int(pk.get("cols", 14))
    x0, y0 = pk.get("origin", (6.0, 60.0))
    dx, dy = pk.get("spacing", (6.0, 8.0))
    occupied_share = float(pk.get("occupied_share", 0.2))
    reserved_rows = int(pk.get("reserved_rows", 1))
    reserved_cols = int(pk.get("reserved_cols", 2))
    back_in_share = float(pk.get("back_in_share", 0.25))
    congestion_max = float(pk.get("congestion_max", 0.6))

    spots: List[ParkingSpot] = []
    sid = 1
    for r in range(rows):
        for c in range(cols):
            spots.append(ParkingSpot(
                sid=f"S{sid}",
                x=x0 + c * dx,
                y=y0 + r * dy,
                occupied=rng.random() < occupied_share,
                reserved=r < reserved_rows and c < reserved_cols,
                # far columns sit behind the exit queue
                exit_friction=(r + 1) * 0.2 + (0.8 if c > 10 else 0.2),
                local_congestion=rng.random() * congestion_max,
                back_in=rng.random() < back_in_share,
            ))
            sid += 1
    return spots

def spot_score(spot: ParkingSpot, entrance: Tuple[float, float], weights: Dict[str, float],
               back_in_penalty: float = DEFAULT_BACK_IN_PENALTY) -> float:
    dist = math.hypot(spot.x - entrance[0], spot.y - entrance[1])
    w = {**DEFAULT_WEIGHTS, **(weights or {})}
    return (
        w["dist"] * dist
        + w["exit"] * spot.exit_friction
        + w["cong"] * spot.local_congestion
        + w["angle"] * (back_in_penalty if spot.back_in else 0.0)
    )

def select_spot(spots: Sequence[ParkingSpot], entrance: Tuple[float, float] = (6.0, 70.0),
                weights: Optional[Dict[str, float]] = None,
                back_in_penalty: float = DEFAULT_BACK_IN_PENALTY) -> Optional[ParkingSpot]:
    """Return the lowest-scoring free, unreserved spot, or None if there is none."""
    best: Optional[ParkingSpot] = None
    best_score = math.inf
    for spot in spots:
        if not spot.available:
            continue
        score = spot_score(spot, entrance, weights or DEFAULT_WEIGHTS, back_in_penalty)
        if score < best_score:
            best, best_score = spot, score
    return best

def release_spot(spots: Sequence[ParkingSpot], sid: str) -> bool:
    for spot in spots:
        if spot.sid == sid:
            spot.occupied = False
            return True
    logger.warning("release of unknown parking spot %s ignored", sid)
    return False
