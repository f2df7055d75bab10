# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Define the concrete stages of the drive-thru network (order lane A,
#   order lane B, pay, pickup) and the order in which they feed each other.
#
# Usage:
#   from drivethru.stations import make_stages, NEXT_STAGE
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Dict, Optional

from .config import StageId
from .queues import Stage

# Downstream stage after a completion; None means the vehicle is served.
NEXT_STAGE: Dict[StageId, Optional[StageId]] = {
    StageId.ORDER_A: StageId.PAY,
    StageId.ORDER_B: StageId.PAY,
    StageId.PAY: StageId.PICKUP,
    StageId.PICKUP: None,
}

def make_stages() -> Dict[StageId, Stage]:
    """
    Create the four service stages, in processing order.

    Returns
    -------
    dict[StageId, Stage]
        Mapping stage id -> Stage instance (insertion order = step order).
    """
    return {stage: Stage(stage.value) for stage in StageId}
