"""Wallet provider gateway for the joke bridge client."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder
from web3.types import RPCEndpoint

from ..constants import RPCErrorCode, RPCMethod
from ..exceptions import (
    NetworkNotRecognizedError,
    ProviderError,
    ProviderUnavailableError,
    UserRejectedError,
    ValidationError,
)
from ..types import Address, NetworkDescriptor, NetworkId
from ..utils import parse_chain_id, rpc_error_fields
from .config import ClientConfig

logger = logging.getLogger(__name__)


def classify_rpc_error(error: Any, method: str) -> ProviderError:
    """Map a JSON-RPC error object or exception onto the provider error types."""

    code, message = rpc_error_fields(error)
    details = {"error": message}

    if code == RPCErrorCode.USER_REJECTED:
        return UserRejectedError(
            f"User rejected {method} request", code=code, method=method, details=details
        )
    if code == RPCErrorCode.UNRECOGNIZED_CHAIN or "unrecognized chain" in message.lower():
        return NetworkNotRecognizedError(
            "Wallet does not recognise the requested chain",
            code=code,
            method=method,
            details=details,
        )
    return ProviderError(
        f"Provider request {method} failed: {message}", code=code, method=method, details=details
    )


class ProviderGateway:
    """Wrap the wallet provider behind the handful of requests the client needs."""

    def __init__(self, config: ClientConfig, web3: AsyncWeb3 | None = None) -> None:
        self.config = config
        self._web3 = web3
        self._signer: LocalAccount | None = None
        self._signer_applied = False

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    async def detect_provider(self) -> AsyncWeb3:
        """Return a reachable web3 instance or raise ``ProviderUnavailableError``."""

        web3 = self._web3
        if web3 is None:
            if not self.config.rpc_url:
                raise ProviderUnavailableError("No wallet provider configured")
            web3 = AsyncWeb3(AsyncHTTPProvider(self.config.rpc_url))

        try:
            reachable = await web3.is_connected()
        except Exception as exc:  # pragma: no cover - defensive
            raise ProviderUnavailableError(
                "Wallet provider is not reachable",
                details={"endpoint": self.config.rpc_url, "error": str(exc)},
            ) from exc

        if not reachable:
            raise ProviderUnavailableError(
                "Wallet provider is not reachable", details={"endpoint": self.config.rpc_url}
            )

        self._web3 = web3
        return web3

    @property
    def web3(self) -> AsyncWeb3:
        if self._web3 is None:
            raise ProviderUnavailableError("Wallet provider not detected; call detect_provider()")
        return self._web3

    # ------------------------------------------------------------------
    # Wallet requests
    # ------------------------------------------------------------------
    async def request_accounts(self) -> list[Address]:
        if self.config.private_key:
            signer = self._local_signer()
            self._apply_signer(signer)
            return [signer.address]

        result = await self.request(RPCMethod.REQUEST_ACCOUNTS, [])
        if not isinstance(result, Sequence) or isinstance(result, str):
            raise ProviderError(
                "Wallet returned a malformed account list",
                method=RPCMethod.REQUEST_ACCOUNTS,
                details={"result": result},
            )

        accounts = [AsyncWeb3.to_checksum_address(account) for account in result]
        logger.debug("Wallet exposed %d account(s)", len(accounts))
        return accounts

    async def get_network_id(self) -> NetworkId:
        result = await self.request(RPCMethod.CHAIN_ID, [])
        try:
            return parse_chain_id(result)
        except ValidationError as exc:
            raise ProviderError(
                "Wallet returned an invalid chain id",
                method=RPCMethod.CHAIN_ID,
                details={"result": result},
            ) from exc

    async def request_network_switch(self, chain_id: NetworkId) -> None:
        await self.request(RPCMethod.SWITCH_CHAIN, [{"chainId": hex(chain_id)}])
        logger.info("Wallet switched to chain %s", chain_id)

    async def request_network_add(self, descriptor: NetworkDescriptor) -> None:
        await self.request(RPCMethod.ADD_CHAIN, [descriptor.as_wallet_params()])
        logger.info("Wallet registered network %s (%s)", descriptor.chain_name, descriptor.chain_id)

    async def request(self, method: str, params: Sequence[Any]) -> Any:
        """Send a raw JSON-RPC request and unwrap its result."""

        web3 = self.web3
        try:
            response = await web3.provider.make_request(RPCEndpoint(method), list(params))
        except Exception as exc:
            raise classify_rpc_error(exc, method) from exc

        if not isinstance(response, Mapping):
            raise ProviderError(
                f"Provider returned a malformed response to {method}",
                method=method,
                details={"response": response},
            )
        if response.get("error") is not None:
            raise classify_rpc_error(response["error"], method)
        return response.get("result")

    # ------------------------------------------------------------------
    # Local signing
    # ------------------------------------------------------------------
    def _local_signer(self) -> LocalAccount:
        if self._signer is not None:
            return self._signer
        try:
            signer = cast(LocalAccount, Account.from_key(self.config.private_key))  # type: ignore[arg-type]
        except Exception as exc:
            raise ValidationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc
        self._signer = signer
        return signer

    def _apply_signer(self, signer: LocalAccount) -> None:
        if self._signer_applied:
            return
        web3 = self.web3
        web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(signer), layer=0)  # type: ignore[arg-type]
        web3.eth.default_account = signer.address
        self._signer_applied = True
