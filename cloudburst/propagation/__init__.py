# cloudburst/propagation/__init__.py
"""
Wind-driven propagation of elevated probability to downwind sectors.
"""
from .constants import PropagationConstants
from .data_models import WindData, PropagationEvent, PropagationResult
from .calculations import (
    wind_factor, distance_decay, propagation_delay, propagated_probability,
    propagate_to_neighbor, propagate_from_sector, propagation_cascade, is_in_wind_path, downwind_sectors
)
from .scheduler import WindPropagationScheduler

__all__ = [
    "PropagationConstants",
    "WindData",
    "PropagationEvent",
    "PropagationResult",
    "wind_factor",
    "distance_decay",
    "propagation_delay",
    "propagated_probability",
    "propagate_to_neighbor",
    "propagate_from_sector",
    "propagation_cascade",
    "is_in_wind_path",
    "downwind_sectors",
    "WindPropagationScheduler"
]
