"""Constants for the joke bridge deployment on OP Sepolia."""

from enum import IntEnum

from .types import NetworkDescriptor

REQUIRED_CHAIN_ID = 11155420

OP_SEPOLIA = NetworkDescriptor(
    chain_id=REQUIRED_CHAIN_ID,
    chain_name="OP Sepolia",
    currency_name="Ether",
    currency_symbol="ETH",
    currency_decimals=18,
    rpc_urls=("https://sepolia.optimism.io",),
    block_explorer_urls=("https://sepolia-optimism.etherscan.io",),
)

SERVICE_CONTRACT_ADDRESS = "0xdd1060a36c7933bce29e86693678a6b4a62cb709"
NFT_CONTRACT_ADDRESS = "0xf3d961368738c109e4859acf4849309757f97428"

EXPLORER_TX_URL = "https://optimism-sepolia.blockscout.com/tx/"
JOKE_API_URL = "https://official-joke-api.appspot.com/random_joke"
NOTIFY_ENDPOINT = "http://localhost:3000/execute-command"
NOTIFY_COMMAND_TEMPLATE = 'just send-nft-info "{text}"'

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class RPCErrorCode(IntEnum):
    """EIP-1193 / EIP-3326 provider error codes."""

    USER_REJECTED = 4001
    UNAUTHORIZED = 4100
    UNSUPPORTED_METHOD = 4200
    DISCONNECTED = 4900
    UNRECOGNIZED_CHAIN = 4902


class RPCMethod:
    REQUEST_ACCOUNTS = "eth_requestAccounts"
    CHAIN_ID = "eth_chainId"
    SWITCH_CHAIN = "wallet_switchEthereumChain"
    ADD_CHAIN = "wallet_addEthereumChain"
