# cloudburst/alerts/constants.py

class AlertConstants:
    ALERT_ID_PREFIX = "alert_"
    # Levels that raise an alert when a sector crosses up into them
    ALERTING_LEVELS = ("high", "critical")
    MAX_ALERT_HISTORY = 500
