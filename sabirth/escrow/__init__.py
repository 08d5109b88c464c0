"""
Escrow Module - Stake coordination with the external Hub.
"""

from .hub import EscrowHub, EscrowError, InMemoryHub, HttpHub, LockCall, ReleaseCall
from .coordinator import EscrowCoordinator

__all__ = [
    "EscrowHub",
    "EscrowError",
    "InMemoryHub",
    "HttpHub",
    "LockCall",
    "ReleaseCall",
    "EscrowCoordinator",
]
