# cloudburst/alerts/__init__.py
"""
Alert lifecycle: creation from state transitions and acknowledgement.
"""
from .constants import AlertConstants
from .data_models import Alert, AlertType, AlertSeverity
from .exceptions import AlertError, AlertNotFoundError
from .manager import AlertManager, severity_for

__all__ = [
    "AlertConstants",
    "Alert",
    "AlertType",
    "AlertSeverity",
    "AlertError",
    "AlertNotFoundError",
    "AlertManager",
    "severity_for"
]
