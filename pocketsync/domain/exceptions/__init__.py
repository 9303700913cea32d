"""Domain exceptions."""
from pocketsync.domain.exceptions.domain_errors import (
    DomainError,
    InvalidTimeframeError,
    UnknownAssetError,
)

__all__ = [
    "DomainError",
    "InvalidTimeframeError",
    "UnknownAssetError",
]
