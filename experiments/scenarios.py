"""
experiments/scenarios.py

Holds scenario definitions (config overrides) to sweep during experiments.
Add staffing levels, demand levels, and policy flags here.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

HIGH_LOAD = {
    "name": "high_load",
    "overrides": {
        "arrivals": {
            "rate_per_hour": 72,
            "mobile_share": 0.35,
        },
        "capacities": {
            "order_a": 1,
            "order_b": 1,
            "pay": 2,
            "pickup": 2,
        },
    },
}

NO_CURBSIDE = {
    "name": "no_curbside",
    "overrides": {
        "arrivals": {"rate_per_hour": 72},
        "capacities": {"pay": 2, "pickup": 2},
        # an unreachable threshold keeps every car in the lanes
        "routing": {"divert_threshold_minutes": 1.0e9},
    },
}

MANUAL_STAFFING = {
    "name": "manual_staffing",
    "overrides": {
        "arrivals": {"rate_per_hour": 72},
        "capacities": {"pay": 2, "pickup": 2},
        "rebalance": {"auto": False},
    },
}

SCENARIOS = [BASELINE, HIGH_LOAD, NO_CURBSIDE, MANUAL_STAFFING]
