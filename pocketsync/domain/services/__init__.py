"""Domain services - Lógica pura sin estado."""
from pocketsync.domain.services.bucket_clock import (
    bucket_start,
    next_bucket_start,
)
from pocketsync.domain.services.history_generator import generate_history

__all__ = [
    "bucket_start",
    "next_bucket_start",
    "generate_history",
]
