"""
Cloudburst - Sector Monitoring Engine
Partitions a monitored region into sensor-anchored sectors, fuses ground and
aerial readings into a per-sector cloudburst probability, propagates elevated
risk downwind and drives the aerial deployment decision.
"""

__version__ = "0.1.0"
