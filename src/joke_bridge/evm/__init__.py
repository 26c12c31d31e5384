"""EVM wallet and contract orchestration for the joke bridge."""

from .client import JokeBridgeClient
from .config import ClientConfig, NotifierConfig, PricingConfig
from .session import ConnectionSession, Session

__all__ = [
    "JokeBridgeClient",
    "ClientConfig",
    "NotifierConfig",
    "PricingConfig",
    "ConnectionSession",
    "Session",
]
