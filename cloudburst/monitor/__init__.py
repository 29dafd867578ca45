# cloudburst/monitor/__init__.py
"""
Monitoring service: the public API that runs the engine against a store.
"""
from .core import MonitoringService, CONNECTED, DISCONNECTED
from .data_models import MonitorConfig, NodeReadings

__all__ = [
    "MonitoringService",
    "MonitorConfig",
    "NodeReadings",
    "CONNECTED",
    "DISCONNECTED"
]
