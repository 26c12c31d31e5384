"""Connection lifecycle for the joke bridge client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..exceptions import (
    NotConnectedError,
    ProviderError,
    ProviderUnavailableError,
    UserRejectedError,
)
from ..types import Address, NetworkId
from .contracts import ContractBinder, ContractHandle
from .network import NetworkGuard
from .provider import ProviderGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Everything a connected wallet exposes to the paid actions."""

    account: Address
    chain_id: NetworkId
    service_contract: ContractHandle
    nft_contract: ContractHandle


class ConnectionSession:
    """Own the single live ``Session``; only connect/disconnect write it."""

    def __init__(
        self,
        gateway: ProviderGateway,
        guard: NetworkGuard,
        binder: ContractBinder,
        required_chain_id: NetworkId,
    ) -> None:
        self._gateway = gateway
        self._guard = guard
        self._binder = binder
        self._required_chain_id = required_chain_id
        self._session: Session | None = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> Session:
        async with self._lock:
            if self._session is not None:
                logger.debug("Wallet already connected as %s", self._session.account)
                return self._session

            try:
                session = await self._open()
            except (ProviderUnavailableError, UserRejectedError):
                raise
            except ProviderError as exc:
                raise ProviderUnavailableError(
                    "Wallet provider failed during connect",
                    details={"method": exc.method, "code": exc.code, "error": exc.message},
                ) from exc

            self._session = session
            logger.info("Connected wallet %s on chain %s", session.account, session.chain_id)
            return session

    def disconnect(self) -> None:
        if self._session is not None:
            logger.info("Disconnected wallet %s", self._session.account)
        self._session = None

    async def _open(self) -> Session:
        web3 = await self._gateway.detect_provider()
        accounts = await self._gateway.request_accounts()
        if not accounts or not accounts[0]:
            raise ProviderError("Wallet did not expose any account", method="eth_requestAccounts")

        service_contract = self._binder.bind_service(web3)
        nft_contract = self._binder.bind_nft(web3)

        await self._guard.ensure_network(self._required_chain_id)

        return Session(
            account=accounts[0],
            chain_id=self._required_chain_id,
            service_contract=service_contract,
            nft_contract=nft_contract,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def is_connected(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Session | None:
        return self._session

    def require(self) -> Session:
        if self._session is None:
            raise NotConnectedError("Wallet is not connected; call connect() first")
        return self._session
