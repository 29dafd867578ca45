# cloudburst/sectors/exceptions.py

class SectorError(Exception):
    """Base exception for sector and node registry errors."""
    pass

class SectorNotFoundError(SectorError):
    """Raised when a sector id is not part of the current partition."""
    def __init__(self, sector_id, message="Sector not found"):
        self.sector_id = sector_id
        super().__init__(f"{message}: {sector_id}")

class NodeNotFoundError(SectorError):
    """Raised when a node id is not registered."""
    def __init__(self, node_id, message="Node not registered"):
        self.node_id = node_id
        super().__init__(f"{message}: {node_id}")
