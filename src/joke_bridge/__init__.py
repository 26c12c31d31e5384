"""Joke bridge - pay for jokes, mint them as NFTs and bridge them on OP Sepolia.

The client wraps an EVM wallet provider, the joke service contract and the
joke NFT contract behind a small set of asynchronous actions.
"""

from .evm import ClientConfig, JokeBridgeClient, NotifierConfig, PricingConfig
from .exceptions import (
    JokeBridgeError,
    NetworkError,
    NetworkNotRecognizedError,
    NotArmedError,
    NotConnectedError,
    ProviderError,
    ProviderUnavailableError,
    TransactionFailedError,
    UnswitchableError,
    UserRejectedError,
    ValidationError,
)
from .types import (
    Address,
    BridgeResult,
    JokePayload,
    MintResult,
    NetworkDescriptor,
    PendingToken,
    Response,
    TxResult,
    Wei,
)
from .utils import encode_joke_token_uri

__version__ = "0.1.0"

__all__ = [
    # Client
    "JokeBridgeClient",
    "ClientConfig",
    "NotifierConfig",
    "PricingConfig",
    # Types
    "Address",
    "BridgeResult",
    "JokePayload",
    "MintResult",
    "NetworkDescriptor",
    "PendingToken",
    "Response",
    "TxResult",
    "Wei",
    # Exceptions
    "JokeBridgeError",
    "NetworkError",
    "NetworkNotRecognizedError",
    "NotArmedError",
    "NotConnectedError",
    "ProviderError",
    "ProviderUnavailableError",
    "TransactionFailedError",
    "UnswitchableError",
    "UserRejectedError",
    "ValidationError",
    # Utility functions
    "encode_joke_token_uri",
]
