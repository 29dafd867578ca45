# cloudburst/aerial/exceptions.py

class AerialError(Exception):
    """Base class for aerial deployment errors."""
    pass

class InvalidTransitionError(AerialError):
    """Raised for any state change outside standby -> deploying -> active -> descending -> standby."""
    def __init__(self, unit_id, current, target, message="Invalid aerial transition"):
        self.unit_id = unit_id
        self.current = current
        self.target = target
        super().__init__(f"{message} for {unit_id}: {getattr(current, 'value', current)} -> {getattr(target, 'value', target)}")

class NoAvailableUnitError(AerialError):
    """Raised when no unit is on standby for a deployment."""
    def __init__(self, sector_id, message="No aerial unit available for deployment"):
        self.sector_id = sector_id
        super().__init__(f"{message} to {sector_id}")

class UnitNotFoundError(AerialError):
    def __init__(self, unit_id, message="Aerial unit not found"):
        self.unit_id = unit_id
        super().__init__(f"{message}: {unit_id}")

class DeploymentRejectedError(AerialError):
    """Raised when launch conditions are not met; carries the decision and its reason."""
    def __init__(self, decision):
        self.decision = decision
        super().__init__(f"Deployment to {decision.sector_id} rejected: {decision.reason}")
