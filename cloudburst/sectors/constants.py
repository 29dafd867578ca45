# cloudburst/sectors/constants.py

class PartitionConstants:
    """Sizing rules for Voronoi sectors."""
    MIN_SECTOR_RADIUS_KM: float = 2.0
    MAX_SECTOR_RADIUS_KM: float = 10.0
    DEFAULT_PADDING_KM: float = 15.0

    # A node that moved further than this forces a full re-partition
    REGENERATION_MOVE_THRESHOLD_KM: float = 0.1

    # Projected points closer than this are treated as the same site
    COINCIDENT_TOLERANCE_KM: float = 1e-6

    SECTOR_ID_PREFIX = "sector_"


class RegistryConstants:
    NODE_TIMEOUT_MINUTES: int = 15
