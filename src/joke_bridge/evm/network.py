"""Keep the connected wallet on the network the contracts live on."""

from __future__ import annotations

import logging

from ..exceptions import NetworkNotRecognizedError, ProviderError, UnswitchableError
from ..types import NetworkDescriptor, NetworkId
from .provider import ProviderGateway

logger = logging.getLogger(__name__)


class NetworkGuard:
    """Switch, or register then switch, the wallet onto the required chain."""

    def __init__(self, gateway: ProviderGateway, descriptor: NetworkDescriptor) -> None:
        self._gateway = gateway
        self._descriptor = descriptor

    async def ensure_network(self, required: NetworkId | None = None) -> None:
        chain_id = self._descriptor.chain_id if required is None else required

        try:
            current = await self._gateway.get_network_id()
        except ProviderError as exc:
            logger.error("Error getting network id: %s", exc)
            raise UnswitchableError(
                "Unable to read the wallet network", chain_id=chain_id, details=exc.details
            ) from exc

        if current == chain_id:
            logger.debug("Wallet already on chain %s", chain_id)
            return

        logger.info("Wallet on chain %s, requesting switch to %s", current, chain_id)
        try:
            await self._gateway.request_network_switch(chain_id)
            return
        except NetworkNotRecognizedError:
            logger.info("Chain %s unknown to wallet, registering it", chain_id)
        except ProviderError as exc:
            logger.error("Error switching network: %s", exc)
            raise UnswitchableError(
                f"Unable to switch wallet to chain {chain_id}",
                chain_id=chain_id,
                details={"current": current, "error": exc.message},
            ) from exc

        if self._descriptor.chain_id != chain_id:
            raise UnswitchableError(
                f"No network descriptor available for chain {chain_id}",
                chain_id=chain_id,
                details={"current": current},
            )

        try:
            await self._gateway.request_network_add(self._descriptor)
            await self._gateway.request_network_switch(chain_id)
        except ProviderError as exc:
            logger.error("Error adding network: %s", exc)
            raise UnswitchableError(
                f"Unable to register chain {chain_id} with the wallet",
                chain_id=chain_id,
                details={"current": current, "error": exc.message},
            ) from exc
