"""Exception hierarchy for the joke bridge client."""

from typing import Any


class JokeBridgeError(Exception):
    """Base exception for all joke bridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(JokeBridgeError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class NetworkError(JokeBridgeError):
    """Raised when an HTTP side service cannot be reached."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ProviderError(JokeBridgeError):
    """Raised when the wallet provider answers a request with an error."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        method: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.code = code
        self.method = method


class NetworkNotRecognizedError(ProviderError):
    """Raised when the wallet does not know the requested chain."""

    pass


class UserRejectedError(ProviderError):
    """Raised when the user dismisses a wallet prompt."""

    pass


class ProviderUnavailableError(JokeBridgeError):
    """Raised when no usable wallet provider is present."""

    pass


class NotConnectedError(JokeBridgeError):
    """Raised when an action needs a connected session and there is none."""

    pass


class UnswitchableError(JokeBridgeError):
    """Raised when the wallet cannot be moved onto the required network."""

    def __init__(self, message: str, chain_id: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.chain_id = chain_id


class TransactionFailedError(JokeBridgeError):
    """Raised when a contract transaction reverts, times out or has a bad receipt."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.method = method
        self.tx_hash = tx_hash


class NotArmedError(JokeBridgeError):
    """Raised when a bridge is requested without a freshly minted token."""

    pass
