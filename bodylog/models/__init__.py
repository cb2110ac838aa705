from bodylog.models.progress_log import ProgressLog

__all__ = [
    "ProgressLog",
]
