"""Configuration containers for the joke bridge client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from web3 import Web3
from web3.types import ChecksumAddress

from ..constants import (
    EXPLORER_TX_URL,
    JOKE_API_URL,
    NFT_CONTRACT_ADDRESS,
    NOTIFY_COMMAND_TEMPLATE,
    NOTIFY_ENDPOINT,
    OP_SEPOLIA,
    SERVICE_CONTRACT_ADDRESS,
)
from ..exceptions import ValidationError
from ..types import NetworkDescriptor

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_JOKE_PRICE_WEI = Web3.to_wei("0.0001", "ether")
DEFAULT_BRIDGE_PRICE_WEI = Web3.to_wei("0.0005", "ether")

ENV_PREFIX = "JOKE_BRIDGE_"


@dataclass(frozen=True)
class NotifierConfig:
    """Configuration for the post-burn command notification."""

    endpoint: str = NOTIFY_ENDPOINT
    command_template: str = NOTIFY_COMMAND_TEMPLATE
    enabled: bool = True


@dataclass(frozen=True)
class PricingConfig:
    """Native currency attached to the paid service calls."""

    joke_price_wei: int = DEFAULT_JOKE_PRICE_WEI
    bridge_price_wei: int = DEFAULT_BRIDGE_PRICE_WEI
    use_onchain_service_cost: bool = True


@dataclass(frozen=True)
class ClientConfig:
    """Aggregated configuration used to construct the joke bridge client."""

    rpc_url: str | None = OP_SEPOLIA.rpc_urls[0]
    service_contract_address: ChecksumAddress = Web3.to_checksum_address(
        SERVICE_CONTRACT_ADDRESS
    )
    nft_contract_address: ChecksumAddress = Web3.to_checksum_address(NFT_CONTRACT_ADDRESS)
    network: NetworkDescriptor = OP_SEPOLIA
    private_key: str | None = field(default=None, repr=False)
    pricing: PricingConfig = PricingConfig()
    notifier: NotifierConfig = NotifierConfig()
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    explorer_tx_url: str = EXPLORER_TX_URL
    joke_api_url: str = JOKE_API_URL

    def explorer_link(self, tx_hash: str) -> str:
        return f"{self.explorer_tx_url.rstrip('/')}/{tx_hash}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a configuration from ``JOKE_BRIDGE_*`` environment variables."""

        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value if value else None

        defaults = cls()
        pricing = PricingConfig(
            joke_price_wei=_wei(get("JOKE_PRICE_ETH"), defaults.pricing.joke_price_wei),
            bridge_price_wei=_wei(get("BRIDGE_PRICE_ETH"), defaults.pricing.bridge_price_wei),
            use_onchain_service_cost=_flag(
                get("USE_ONCHAIN_COST"), defaults.pricing.use_onchain_service_cost
            ),
        )
        notifier = NotifierConfig(
            endpoint=get("NOTIFY_URL") or defaults.notifier.endpoint,
            command_template=defaults.notifier.command_template,
            enabled=_flag(get("NOTIFY_ENABLED"), defaults.notifier.enabled),
        )

        return cls(
            rpc_url=get("RPC_URL") or defaults.rpc_url,
            service_contract_address=_address(
                get("SERVICE_CONTRACT"), defaults.service_contract_address, "SERVICE_CONTRACT"
            ),
            nft_contract_address=_address(
                get("NFT_CONTRACT"), defaults.nft_contract_address, "NFT_CONTRACT"
            ),
            private_key=get("PRIVATE_KEY"),
            pricing=pricing,
            notifier=notifier,
            receipt_timeout=float(get("RECEIPT_TIMEOUT") or defaults.receipt_timeout),
            request_timeout=float(get("REQUEST_TIMEOUT") or defaults.request_timeout),
        )


def _wei(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return Web3.to_wei(value, "ether")
    except Exception as exc:
        raise ValidationError(
            "Price must be a decimal ether amount", field="price", value=value
        ) from exc


def _flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _address(value: str | None, default: ChecksumAddress, name: str) -> ChecksumAddress:
    if value is None:
        return default
    try:
        return Web3.to_checksum_address(value)
    except ValueError as exc:
        raise ValidationError("Invalid contract address", field=name, value=value) from exc
