#!/usr/bin/env python3
# cloudburst/examples/E020_wind_propagation.py
"""
Shows how wind direction changes which sectors a storm reaches.
"""
import sys
import time
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from cloudburst.geo import cardinal_direction
from cloudburst.propagation import WindData, WindPropagationScheduler
from cloudburst.sectors import SensorNode, SpatialPartitioner, create_sectors

NODES = [
    SensorNode(node_id=f"n{row}{col}", name=f"Grid {row}-{col}", lat=31.0 + row * 0.06, lng=77.0 + col * 0.07)
    for row in range(3) for col in range(3)
]
SOURCE = "sector_n11"


def main():
    now = time.time()
    result = SpatialPartitioner().partition(NODES)

    for direction in (0.0, 90.0, 225.0):
        sectors = create_sectors(result, NODES, now=now)
        sectors[SOURCE].set_probability(85.0, 0.9, now)
        scheduler = WindPropagationScheduler()
        wind = WindData(speed=6.0, direction=direction)

        cascade = scheduler.propagate_cascade(sectors[SOURCE], sectors, wind, now)
        print(f"\nWind towards {cardinal_direction(direction)} ({direction:.0f} deg), 6 m/s: "
              f"{len(cascade.events)} sectors affected")
        for event in sorted(cascade.events, key=lambda e: -e.probability):
            print(f"  > {event.target_sector_id}: {event.probability:5.1f}%  "
                  f"arrives in {event.delay_minutes:5.1f} min  (hop {event.hop}, wind factor {event.wind_factor})")

        applied = scheduler.apply_due_events(sectors, now + 3 * 3600)
        print(f"  After 3 hours: {len(applied)} sectors raised")


if __name__ == "__main__":
    main()
