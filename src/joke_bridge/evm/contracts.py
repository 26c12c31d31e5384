"""Contract handle binding for the joke service and joke NFT contracts."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from web3 import AsyncWeb3
from web3.contract import AsyncContract
from web3.types import ChecksumAddress

from ..abi import JokeNFT_abi, JokeService_abi
from ..exceptions import ValidationError
from .config import ClientConfig

SERVICE_CONTRACT = "service"
NFT_CONTRACT = "nft"

HandleKey = tuple[str, str, str]


def abi_fingerprint(abi: Sequence[dict[str, Any]]) -> str:
    encoded = json.dumps(list(abi), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ContractHandle:
    """An ABI and address pair bound to a web3 contract object."""

    name: str
    address: ChecksumAddress
    fingerprint: str
    abi: tuple[dict[str, Any], ...] = field(repr=False, compare=False)
    contract: AsyncContract = field(repr=False, compare=False)

    def function(self, method: str, *args: Any) -> Any:
        try:
            factory = getattr(self.contract.functions, method)
        except AttributeError as exc:
            raise ValidationError(
                f"Contract {self.name} has no function {method}", field="method", value=method
            ) from exc
        return factory(*args)


class ContractBinder:
    """Build contract handles; pure construction with no network I/O.

    Handles are cached per web3 instance, so binding the same name, address and
    ABI twice returns the same handle.
    """

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        self._handles: dict[AsyncWeb3, dict[HandleKey, ContractHandle]] = {}

    def bind(
        self,
        name: str,
        abi: Sequence[dict[str, Any]],
        address: str,
        web3: AsyncWeb3,
    ) -> ContractHandle:
        try:
            checksum = AsyncWeb3.to_checksum_address(address)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid {name} contract address", field="address", value=address
            ) from exc

        fingerprint = abi_fingerprint(abi)
        cached = self._handles.setdefault(web3, {})
        key = (name, checksum, fingerprint)
        handle = cached.get(key)
        if handle is None:
            handle = ContractHandle(
                name=name,
                address=checksum,
                fingerprint=fingerprint,
                abi=tuple(abi),
                contract=web3.eth.contract(address=checksum, abi=list(abi)),
            )
            cached[key] = handle
        return handle

    def bind_service(self, web3: AsyncWeb3) -> ContractHandle:
        return self.bind(
            SERVICE_CONTRACT, JokeService_abi, self.config.service_contract_address, web3
        )

    def bind_nft(self, web3: AsyncWeb3) -> ContractHandle:
        return self.bind(NFT_CONTRACT, JokeNFT_abi, self.config.nft_contract_address, web3)
