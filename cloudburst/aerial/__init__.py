# cloudburst/aerial/__init__.py
"""
Aerial unit deployment: launch triggers and the unit state machine.
"""
from .constants import AerialConstants
from .data_models import AerialStatus, AerialUnit, DeploymentDecision
from .exceptions import (
    AerialError, InvalidTransitionError, NoAvailableUnitError, UnitNotFoundError, DeploymentRejectedError
)
from .controller import AerialDeploymentController, battery_recall_policy, ALLOWED_TRANSITIONS

__all__ = [
    "AerialConstants",
    "AerialStatus",
    "AerialUnit",
    "DeploymentDecision",
    "AerialError",
    "InvalidTransitionError",
    "NoAvailableUnitError",
    "UnitNotFoundError",
    "DeploymentRejectedError",
    "AerialDeploymentController",
    "battery_recall_policy",
    "ALLOWED_TRANSITIONS"
]
