"""Type definitions and data models for the joke bridge client."""

from dataclasses import dataclass, field
from typing import Any

from .utils import serialise_receipt

Address = str  # Ethereum address
Wei = int  # Native currency amount
NetworkId = int
TokenId = int


@dataclass(frozen=True)
class JokePayload:
    """A setup/punchline pair fetched from the joke API."""

    setup: str
    punchline: str

    @property
    def is_complete(self) -> bool:
        return bool(self.setup.strip()) and bool(self.punchline.strip())

    @property
    def text(self) -> str:
        """Joke text as forwarded to the notification endpoint."""

        return f"{self.setup}___{self.punchline}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JokePayload":
        return cls(setup=str(data["setup"]), punchline=str(data["punchline"]))


@dataclass(frozen=True)
class NetworkDescriptor:
    """Chain metadata used when asking a wallet to register a network."""

    chain_id: NetworkId
    chain_name: str
    currency_name: str = "Ether"
    currency_symbol: str = "ETH"
    currency_decimals: int = 18
    rpc_urls: tuple[str, ...] = ()
    block_explorer_urls: tuple[str, ...] = ()

    @property
    def hex_chain_id(self) -> str:
        return hex(self.chain_id)

    def as_wallet_params(self) -> dict[str, Any]:
        """Return the ``wallet_addEthereumChain`` parameter object."""

        return {
            "chainId": self.hex_chain_id,
            "chainName": self.chain_name,
            "nativeCurrency": {
                "name": self.currency_name,
                "symbol": self.currency_symbol,
                "decimals": self.currency_decimals,
            },
            "rpcUrls": list(self.rpc_urls),
            "blockExplorerUrls": list(self.block_explorer_urls),
        }


@dataclass(frozen=True)
class TxResult:
    """Outcome of a confirmed contract transaction."""

    method: str
    tx_hash: str
    value_wei: Wei
    block_number: int | None
    receipt: Any = field(repr=False, compare=False)

    def serialised_receipt(self) -> Any:
        return serialise_receipt(self.receipt)


@dataclass(frozen=True)
class PendingToken:
    """The most recently minted NFT waiting to be bridged."""

    token_id: TokenId
    joke: JokePayload
    mint_tx_hash: str


@dataclass(frozen=True)
class MintResult:
    token_id: TokenId
    tx_hash: str
    explorer_url: str


@dataclass(frozen=True)
class BridgeResult:
    token_id: TokenId
    payment_tx_hash: str | None
    burn_tx_hash: str
    notified: bool


@dataclass
class Response:
    """Generic response for all user-facing actions."""

    success: bool
    transaction_hash: str | None = None
    error: str | None = None
    error_kind: str | None = None
    raw_response: dict[str, Any] | None = None
    token_id: TokenId | None = None
    explorer_url: str | None = None
    joke: JokePayload | None = None
    amount: Wei | None = None
    account: Address | None = None
    notified: bool | None = None
