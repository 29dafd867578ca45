# cloudburst/alerts/exceptions.py

class AlertError(Exception):
    """Base class for alert lifecycle errors."""
    pass

class AlertNotFoundError(AlertError):
    """Raised when an alert id is unknown."""
    def __init__(self, alert_id, message="Alert not found"):
        self.alert_id = alert_id
        super().__init__(f"{message}: {alert_id}")
