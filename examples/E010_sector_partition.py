#!/usr/bin/env python3
# cloudburst/examples/E010_sector_partition.py
"""
Partitions a small sensor network into sectors and prints the neighbour
graph, sector areas and the GeoJSON of one sector.
"""
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from cloudburst.geo import polygon_area_km2
from cloudburst.sectors import SensorNode, SpatialPartitioner, create_sectors, sector_to_geojson

# --- Network ---
NODES = [
    SensorNode(node_id="joshimath", name="Joshimath", lat=30.5550, lng=79.5650),
    SensorNode(node_id="tapovan", name="Tapovan", lat=30.4930, lng=79.6290),
    SensorNode(node_id="raini", name="Raini", lat=30.5190, lng=79.7100),
    SensorNode(node_id="helang", name="Helang", lat=30.4780, lng=79.4720),
    SensorNode(node_id="pipalkoti", name="Pipalkoti", lat=30.4280, lng=79.4330),
]


def main():
    partitioner = SpatialPartitioner()
    result = partitioner.partition(NODES)
    sectors = create_sectors(result, NODES)

    print(f"Partitioned {len(NODES)} nodes into {len(sectors)} sectors")
    print(f"Bounds: {result.bounds.to_dict()}")
    print("-" * 40)
    for sector in sectors.values():
        area = polygon_area_km2(sector.polygon)
        print(f"  > {sector.name:<10} {area:6.1f} km2  neighbours: {', '.join(sector.neighbors)}")

    print("\nGeoJSON for sector_joshimath:")
    print(json.dumps(sector_to_geojson(sectors["sector_joshimath"]), indent=2)[:600] + " ...")


if __name__ == "__main__":
    main()
