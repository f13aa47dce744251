# Utilities
from .retry import backoff_delay, retry_call

__all__ = [
    "backoff_delay",
    "retry_call",
]
