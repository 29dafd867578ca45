# ~/cloudburst/run_monitor.py
import os
import sys
import time

# Add the project root to the Python path to ensure imports work correctly
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from cloudburst.monitor import MonitoringService, MonitorConfig
from cloudburst.store import InMemoryStore

# Sensor nodes along the Mandakini valley, Uttarakhand
NODES = {
    "kedarnath": {"name": "Kedarnath", "lat": 30.7352, "lng": 79.0669},
    "gaurikund": {"name": "Gaurikund", "lat": 30.6520, "lng": 79.0240},
    "sonprayag": {"name": "Sonprayag", "lat": 30.6300, "lng": 78.9990},
    "phata": {"name": "Phata", "lat": 30.5830, "lng": 79.0290},
    "guptkashi": {"name": "Guptkashi", "lat": 30.5260, "lng": 79.0800},
}


def main():
    """
    Runs the monitoring engine against an in-memory store: loads the node
    registry, feeds a storm into one sector and ticks until the downwind
    sectors have been reached.
    """
    now = time.time()
    millis = int(now * 1000)
    store = InMemoryStore({
        "registry": {"nodes": {node_id: dict(record, lastSeen=millis) for node_id, record in NODES.items()}},
        "weather": {"wind": {"speed": 14.0, "direction": 200.0}},
        "aerial": {"payload_1": {"status": "standby", "batteryLevel": 100}},
    })

    service = MonitoringService(store, MonitorConfig(auto_deploy=True))
    print("--- Starting Cloudburst Monitor ---")
    response = service.load_from_store(now=now)
    print(response["message"])
    print("-" * 40)

    for sector in sorted(service.sectors.values(), key=lambda s: s.sector_id):
        print(f"  > {sector.name:<10} neighbours: {', '.join(sector.neighbors) or '-'}")

    print("\n[1] Heavy rain over Kedarnath...")
    service.subscribe_to_store()
    store.set("readings/kedarnath", {
        "weather": {"temperature": 14, "pressure": 985, "humidity": 96, "timestamp": millis},
        "rainfall": {"rate": 135, "cumulative": 40, "timestamp": millis},
    })
    sector = service.get_sector("sector_kedarnath")
    print(f"    Probability {sector.current_probability:.1f}% ({sector.alert_level.value}), "
          f"cloudburst detected: {sector.cloudburst_detected}")

    print("\n[2] Pending propagation:")
    for event in service.scheduler.pending_events():
        print(f"    {event.source_sector_id} -> {event.target_sector_id}: {event.probability:.1f}% "
              f"in {event.delay_minutes:.0f} min (hop {event.hop})")

    print("\n[3] Advancing the clock...")
    # Nodes time out after 15 minutes without data
    for minute in range(0, 15):
        result = service.tick(now=now + minute * 60)
        if result["applied"] or result["units_changed"]:
            print(f"    t+{minute:>2} min: applied {result['applied']}, units {result['units_changed']}")

    print("\n[4] Alerts:")
    for alert in service.alerts.list_alerts():
        print(f"    [{alert.severity.value:<8}] {alert.title}")

    print("\n[5] Status:")
    for key, value in service.system_status().items():
        print(f"    {key}: {value}")

    service.stop()
    print("\n--- Monitor Stopped ---")


if __name__ == "__main__":
    main()
