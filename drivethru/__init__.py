"""
drivethru package initializer.

This package contains the fixed-step simulation engine, stage primitives,
routing and staffing policies, the curbside parking allocator, Erlang-C
estimates and metric collection for the drive-thru queueing network.
"""
import logging

from .config import Parameters, StageId, load_cfg
from .logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    set_level,
)
from .simulation import Simulation, SimState, run_one_day

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "entities", "config", "analytic", "policies", "parking", "queues",
    "stations", "arrivals", "network", "metrics", "simulation",
    "Parameters", "StageId", "load_cfg",
    "Simulation", "SimState", "run_one_day",
    "configure_from_env", "disable_logging", "enable_console_logging",
    "enable_file_logging", "set_level",
]
