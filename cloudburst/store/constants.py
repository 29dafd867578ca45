# cloudburst/store/constants.py

class StorePaths:
    """Top-level paths of the realtime store."""
    NODES = "registry/nodes"
    SECTORS = "sectors"
    WIND = "weather/wind"
    READINGS = "readings"
    AERIAL = "aerial"
    ALERTS = "alerts"

    @staticmethod
    def alert(alert_id: str) -> str:
        return f"{StorePaths.ALERTS}/{alert_id}"
