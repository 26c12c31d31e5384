from __future__ import annotations

import asyncio
import itertools
from types import SimpleNamespace
from typing import Any

import pytest
from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from joke_bridge.constants import REQUIRED_CHAIN_ID, ZERO_ADDRESS
from joke_bridge.evm.config import ClientConfig, NotifierConfig
from joke_bridge.evm.contracts import ContractBinder
from joke_bridge.evm.flow import MintBurnFlow
from joke_bridge.evm.network import NetworkGuard
from joke_bridge.evm.provider import ProviderGateway
from joke_bridge.evm.session import ConnectionSession
from joke_bridge.evm.transactions import PaidActionExecutor
from joke_bridge.types import JokePayload

ACCOUNT = "0x1111111111111111111111111111111111111111"
OTHER_CHAIN_ID = 1

_USER_REJECTED = {"code": 4001, "message": "User rejected the request."}


class DummyWallet:
    """EIP-1193 style wallet answering raw JSON-RPC requests."""

    def __init__(
        self,
        *,
        chain_id: int = REQUIRED_CHAIN_ID,
        accounts: list[str] | None = None,
        known_chains: set[int] | None = None,
        rejected: set[str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.chain_id = chain_id
        self.accounts = [ACCOUNT] if accounts is None else accounts
        self.known_chains = {chain_id} if known_chains is None else known_chains
        self.rejected = rejected or set()
        self.failing = failing or set()
        self.calls: list[tuple[str, Any]] = []

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    async def make_request(self, method: str, params: Any) -> dict[str, Any]:
        self.calls.append((method, params))
        await asyncio.sleep(0)
        if method in self.rejected:
            return {"jsonrpc": "2.0", "id": 1, "error": dict(_USER_REJECTED)}
        if method in self.failing:
            return {"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "boom"}}

        if method == "eth_requestAccounts":
            return {"jsonrpc": "2.0", "id": 1, "result": list(self.accounts)}
        if method == "eth_chainId":
            return {"jsonrpc": "2.0", "id": 1, "result": hex(self.chain_id)}
        if method == "wallet_switchEthereumChain":
            target = int(params[0]["chainId"], 16)
            if target not in self.known_chains:
                return {
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": 4902, "message": "Unrecognized chain ID"},
                }
            self.chain_id = target
            return {"jsonrpc": "2.0", "id": 1, "result": None}
        if method == "wallet_addEthereumChain":
            self.known_chains.add(int(params[0]["chainId"], 16))
            return {"jsonrpc": "2.0", "id": 1, "result": None}
        return {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "not found"}}


class DummyFunction:
    def __init__(self, contract: DummyContract, name: str, args: tuple[Any, ...]) -> None:
        self._contract = contract
        self.name = name
        self.args = args

    async def transact(self, tx: dict[str, Any]) -> HexBytes:
        return self._contract.chain.submit(self._contract, self.name, self.args, tx)

    async def call(self) -> Any:
        value = self._contract.views[self.name]
        if isinstance(value, Exception):
            raise value
        return value


class DummyFunctions:
    def __init__(self, contract: DummyContract) -> None:
        self._contract = contract

    def __getattr__(self, name: str) -> Any:
        return lambda *args: DummyFunction(self._contract, name, args)


class DummyTransferEvent:
    def process_receipt(self, receipt: dict[str, Any], errors: Any = None) -> list[dict[str, Any]]:
        return [{"event": "Transfer", "args": dict(args)} for args in receipt.get("transfers", [])]


class DummyContract:
    def __init__(self, chain: DummyChain, address: str, abi: list[dict[str, Any]]) -> None:
        self.chain = chain
        self.address = address
        self.abi = abi
        self.w3 = chain.web3
        self.functions = DummyFunctions(self)
        self.events = SimpleNamespace(Transfer=DummyTransferEvent)
        self.views: dict[str, Any] = {}
        # method -> list of outcomes consumed per call: "ok", "revert", "reject", "status0", "timeout"
        self.outcomes: dict[str, list[str]] = {}
        self.minted_token_ids: list[int] = []


class DummyChain:
    """Records transactions and produces receipts for the dummy contracts."""

    def __init__(self, web3: DummyWeb3) -> None:
        self.web3 = web3
        self.sent: list[tuple[str, str, tuple[Any, ...], dict[str, Any]]] = []
        self.receipts: dict[bytes, Any] = {}
        self._counter = itertools.count(1)

    def submit(
        self, contract: DummyContract, name: str, args: tuple[Any, ...], tx: dict[str, Any]
    ) -> HexBytes:
        queue = contract.outcomes.get(name)
        outcome = queue.pop(0) if queue else "ok"
        if outcome == "reject":
            raise RuntimeError(dict(_USER_REJECTED))
        if outcome == "revert":
            raise RuntimeError("execution reverted: ERC721NonexistentToken")

        self.sent.append((contract.address, name, args, dict(tx)))
        number = next(self._counter)
        tx_hash = HexBytes(number.to_bytes(32, "big"))
        receipt: dict[str, Any] = {
            "status": 0 if outcome == "status0" else 1,
            "blockNumber": 100 + number,
            "transactionHash": tx_hash,
            "transfers": [],
        }
        if name == "mint" and contract.minted_token_ids:
            receipt["transfers"].append(
                {"from": ZERO_ADDRESS, "to": tx["from"], "tokenId": contract.minted_token_ids.pop(0)}
            )
        self.receipts[bytes(tx_hash)] = "timeout" if outcome == "timeout" else receipt
        return tx_hash

    def methods(self) -> list[str]:
        return [name for _, name, _, _ in self.sent]


class DummyEth:
    def __init__(self, web3: DummyWeb3) -> None:
        self._web3 = web3
        self.default_account: str | None = None

    def contract(self, address: str, abi: list[dict[str, Any]]) -> DummyContract:
        key = address.lower()
        registry = self._web3.contracts
        if key not in registry:
            registry[key] = DummyContract(self._web3.chain, address, abi)
        return registry[key]

    async def wait_for_transaction_receipt(self, tx_hash: HexBytes, timeout: float) -> Any:
        for _ in range(3):
            await asyncio.sleep(0)
        receipt = self._web3.chain.receipts[bytes(tx_hash)]
        if receipt == "timeout":
            raise TimeExhausted(f"no receipt after {timeout}")
        return receipt


class DummyWeb3:
    def __init__(self, wallet: DummyWallet | None = None, *, connected: bool = True) -> None:
        self.provider = wallet or DummyWallet()
        self.connected = connected
        self.contracts: dict[str, DummyContract] = {}
        self.chain = DummyChain(self)
        self.eth = DummyEth(self)
        self.injected: list[Any] = []
        self.middleware_onion = SimpleNamespace(
            inject=lambda middleware, layer=None: self.injected.append(middleware)
        )

    async def is_connected(self) -> bool:
        return self.connected

    def contract_at(self, address: str) -> DummyContract:
        return self.contracts[address.lower()]


class DummyNotifier:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.jokes: list[JokePayload] = []

    def notify(self, joke: JokePayload) -> bool:
        self.jokes.append(joke)
        return self.result


class Stack(SimpleNamespace):
    config: ClientConfig
    web3: DummyWeb3
    wallet: DummyWallet
    gateway: ProviderGateway
    guard: NetworkGuard
    binder: ContractBinder
    session: ConnectionSession
    executor: PaidActionExecutor
    flow: MintBurnFlow
    notifier: DummyNotifier

    @property
    def service(self) -> DummyContract:
        return self.web3.contract_at(self.config.service_contract_address)

    @property
    def nft(self) -> DummyContract:
        return self.web3.contract_at(self.config.nft_contract_address)


def build_stack(wallet: DummyWallet | None = None, config: ClientConfig | None = None) -> Stack:
    config = config or ClientConfig(notifier=NotifierConfig(enabled=False))
    web3 = DummyWeb3(wallet)
    gateway = ProviderGateway(config, web3)  # type: ignore[arg-type]
    guard = NetworkGuard(gateway, config.network)
    binder = ContractBinder(config)
    session = ConnectionSession(gateway, guard, binder, config.network.chain_id)
    executor = PaidActionExecutor(session, guard, receipt_timeout=5.0)
    notifier = DummyNotifier()
    flow = MintBurnFlow(config, session, executor, notifier)  # type: ignore[arg-type]
    return Stack(
        config=config,
        web3=web3,
        wallet=web3.provider,
        gateway=gateway,
        guard=guard,
        binder=binder,
        session=session,
        executor=executor,
        flow=flow,
        notifier=notifier,
    )


@pytest.fixture
def stack() -> Stack:
    return build_stack()


@pytest.fixture
def joke() -> JokePayload:
    return JokePayload(setup="Why did the chicken cross the road?", punchline="To get to the other side.")
