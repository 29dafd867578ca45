from .timestamps import to_epoch_seconds, to_iso, to_epoch_millis

__all__ = [
    "to_epoch_seconds",
    "to_iso",
    "to_epoch_millis"
]
