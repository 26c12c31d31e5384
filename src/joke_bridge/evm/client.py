"""Joke bridge client mapping user actions onto the wallet/contract workflow."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests
from web3 import AsyncWeb3

from ..exceptions import JokeBridgeError, ProviderError, ValidationError
from ..jokes import JokeSource
from ..notifier import CommandNotifier
from ..types import JokePayload, Response, Wei
from .config import ClientConfig
from .contracts import ContractBinder
from .flow import MintBurnFlow
from .network import NetworkGuard
from .provider import ProviderGateway
from .session import ConnectionSession
from .transactions import PaidActionExecutor

logger = logging.getLogger(__name__)

CONNECT_LABEL = "Connect wallet"
DISCONNECT_LABEL = "Disconnect"


class JokeBridgeClient:
    """Pay for jokes, mint them as NFTs and bridge them.

    Every action returns a ``Response``; failures are logged and reported with
    ``success=False`` and the error class name in ``error_kind``. State only
    changes after the underlying transaction has been confirmed.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        web3: AsyncWeb3 | None = None,
        http_session: requests.Session | None = None,
        joke_source: JokeSource | None = None,
        notifier: CommandNotifier | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._http = http_session or requests.Session()

        self._gateway = ProviderGateway(self._config, web3)
        self._guard = NetworkGuard(self._gateway, self._config.network)
        self._binder = ContractBinder(self._config)
        self._connection = ConnectionSession(
            self._gateway, self._guard, self._binder, self._config.network.chain_id
        )
        self._executor = PaidActionExecutor(
            self._connection, self._guard, receipt_timeout=self._config.receipt_timeout
        )
        self._notifier = notifier or CommandNotifier(
            self._config.notifier, self._http, request_timeout=self._config.request_timeout
        )
        self._jokes = joke_source or JokeSource(
            self._config.joke_api_url, self._http, request_timeout=self._config.request_timeout
        )
        self._flow = MintBurnFlow(self._config, self._connection, self._executor, self._notifier)
        self._current_joke: JokePayload | None = None

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    async def connect(self) -> Response:
        try:
            session = await self._connection.connect()
        except JokeBridgeError as exc:
            return self._failure("connect", exc)
        return Response(success=True, account=session.account)

    def disconnect(self) -> Response:
        self._connection.disconnect()
        return Response(success=True)

    async def toggle_connection(self) -> Response:
        if self._connection.is_connected:
            return self.disconnect()
        return await self.connect()

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    @property
    def connection_label(self) -> str:
        return DISCONNECT_LABEL if self._connection.is_connected else CONNECT_LABEL

    @property
    def connection(self) -> ConnectionSession:
        return self._connection

    @property
    def flow(self) -> MintBurnFlow:
        return self._flow

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def pay_for_joke(self) -> Response:
        try:
            session = self._connection.require()
            price = await self._joke_price()
            result = await self._executor.pay_and_call(
                session.service_contract, "payService", price, session.account
            )
        except JokeBridgeError as exc:
            return self._failure("pay_for_joke", exc)

        self._current_joke = None
        try:
            joke = await asyncio.to_thread(self._jokes.fetch)
        except JokeBridgeError as exc:
            response = self._failure("fetch_joke", exc)
            response.transaction_hash = result.tx_hash
            response.amount = price
            return response

        self._current_joke = joke
        return Response(
            success=True,
            transaction_hash=result.tx_hash,
            amount=price,
            joke=joke,
            raw_response={"receipt": result.serialised_receipt()},
        )

    async def mint_current_joke(self) -> Response:
        joke = self._current_joke
        if joke is None or not joke.is_complete:
            error = ValidationError("No joke to mint; pay for a joke first", field="joke")
            return self._failure("mint", error)

        try:
            result = await self._flow.mint(joke)
        except JokeBridgeError as exc:
            return self._failure("mint", exc)

        return Response(
            success=True,
            transaction_hash=result.tx_hash,
            token_id=result.token_id,
            explorer_url=result.explorer_url,
            joke=joke,
        )

    async def bridge(self) -> Response:
        try:
            result = await self._flow.bridge_and_burn()
        except JokeBridgeError as exc:
            pending = self._flow.pending_token
            response = self._failure("bridge", exc)
            response.token_id = pending.token_id if pending else None
            return response

        return Response(
            success=True,
            transaction_hash=result.burn_tx_hash,
            token_id=result.token_id,
            notified=result.notified,
            amount=self._config.pricing.bridge_price_wei if result.payment_tx_hash else 0,
            raw_response={
                "payment_tx_hash": result.payment_tx_hash,
                "burn_tx_hash": result.burn_tx_hash,
            },
        )

    @property
    def bridge_armed(self) -> bool:
        return self._flow.armed

    @property
    def current_joke(self) -> JokePayload | None:
        return self._current_joke

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    async def service_cost(self) -> Response:
        try:
            cost = await self._read_service_cost()
        except JokeBridgeError as exc:
            return self._failure("service_cost", exc)
        return Response(success=True, amount=cost)

    async def contract_balance(self) -> Response:
        try:
            session = self._connection.require()
            balance = int(
                await self._executor.call(session.service_contract, "getContractBalance")
            )
        except JokeBridgeError as exc:
            return self._failure("contract_balance", exc)
        logger.info("Service contract balance: %s wei", balance)
        return Response(success=True, amount=balance)

    async def _read_service_cost(self) -> Wei:
        session = self._connection.require()
        return int(await self._executor.call(session.service_contract, "serviceCost"))

    async def _joke_price(self) -> Wei:
        pricing = self._config.pricing
        if not pricing.use_onchain_service_cost:
            return pricing.joke_price_wei
        try:
            return await self._read_service_cost()
        except ProviderError as exc:
            logger.warning(
                "serviceCost() unavailable, using configured price %s wei: %s",
                pricing.joke_price_wei,
                exc,
            )
            return pricing.joke_price_wei

    @staticmethod
    def _failure(action: str, exc: JokeBridgeError) -> Response:
        logger.error("%s failed: %s", action, exc)
        details: dict[str, Any] = dict(exc.details)
        return Response(
            success=False,
            error=str(exc),
            error_kind=type(exc).__name__,
            raw_response={"action": action, "error_details": details} if details else None,
        )
