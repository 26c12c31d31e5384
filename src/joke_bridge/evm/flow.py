"""Mint a joke NFT, then bridge and burn it."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from web3.logs import DISCARD

from ..constants import ZERO_ADDRESS
from ..exceptions import JokeBridgeError, NotArmedError, TransactionFailedError
from ..notifier import CommandNotifier
from ..types import Address, BridgeResult, JokePayload, MintResult, PendingToken, TxResult
from ..utils import encode_joke_token_uri
from .config import ClientConfig
from .contracts import ContractHandle
from .session import ConnectionSession
from .transactions import PaidActionExecutor

logger = logging.getLogger(__name__)


class MintBurnFlow:
    """Track the single pending token between a mint and the bridge that burns it.

    A successful ``mint`` arms exactly one bridge; minting again before bridging
    replaces the pending token. ``bridge_and_burn`` pays the bridge fee, burns
    the pending token and notifies the command endpoint. When the payment lands
    but the burn fails the token stays pending and the payment is remembered, so
    calling ``bridge_and_burn`` again only retries the burn.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: ConnectionSession,
        executor: PaidActionExecutor,
        notifier: CommandNotifier | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._executor = executor
        self._notifier = notifier
        self._pending: PendingToken | None = None
        self._paid_token_id: int | None = None
        self._bridging = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def pending_token(self) -> PendingToken | None:
        return self._pending

    @property
    def armed(self) -> bool:
        return self._pending is not None and not self._bridging

    def reset(self) -> None:
        self._pending = None
        self._paid_token_id = None

    # ------------------------------------------------------------------
    # Mint
    # ------------------------------------------------------------------
    async def mint(self, joke: JokePayload) -> MintResult:
        session = self._session.require()
        token_uri = encode_joke_token_uri(joke.setup, joke.punchline)

        result = await self._executor.pay_and_call(
            session.nft_contract, "mint", 0, session.account, args=(token_uri,)
        )
        token_id = self._minted_token_id(session.nft_contract, result, session.account)

        if self._pending is not None:
            logger.warning(
                "Replacing pending token %s with newly minted token %s",
                self._pending.token_id,
                token_id,
            )
        self._pending = PendingToken(token_id=token_id, joke=joke, mint_tx_hash=result.tx_hash)

        explorer_url = self._config.explorer_link(result.tx_hash)
        logger.info("Minted token %s (tx %s)", token_id, result.tx_hash)
        return MintResult(token_id=token_id, tx_hash=result.tx_hash, explorer_url=explorer_url)

    def _minted_token_id(self, handle: ContractHandle, result: TxResult, account: Address) -> int:
        try:
            events = list(
                handle.contract.events.Transfer().process_receipt(result.receipt, errors=DISCARD)
            )
        except Exception as exc:
            raise TransactionFailedError(
                "Unable to decode Transfer events from mint receipt",
                method=result.method,
                tx_hash=result.tx_hash,
                details={"error": str(exc)},
            ) from exc

        mints = [event for event in events if _arg(event, "from").lower() == ZERO_ADDRESS]
        candidates = mints or events
        if not candidates:
            raise TransactionFailedError(
                "Mint receipt carries no Transfer event",
                method=result.method,
                tx_hash=result.tx_hash,
            )

        owned = [event for event in candidates if _arg(event, "to").lower() == account.lower()]
        event = (owned or candidates)[-1]
        try:
            return int(event["args"]["tokenId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TransactionFailedError(
                "Transfer event has no usable tokenId",
                method=result.method,
                tx_hash=result.tx_hash,
            ) from exc

    # ------------------------------------------------------------------
    # Bridge
    # ------------------------------------------------------------------
    async def bridge_and_burn(self) -> BridgeResult:
        pending = self._pending
        if pending is None or self._bridging:
            raise NotArmedError("Bridge is not armed; mint a joke NFT first")

        session = self._session.require()
        self._bridging = True
        try:
            payment_hash: str | None = None
            if self._paid_token_id != pending.token_id:
                payment = await self._executor.pay_and_call(
                    session.service_contract,
                    "payService",
                    self._config.pricing.bridge_price_wei,
                    session.account,
                )
                self._paid_token_id = pending.token_id
                payment_hash = payment.tx_hash
                logger.info("Bridge paid for token %s (tx %s)", pending.token_id, payment_hash)
            else:
                logger.info("Bridge already paid for token %s; retrying burn", pending.token_id)

            try:
                burn = await self._executor.pay_and_call(
                    session.nft_contract,
                    "burn",
                    0,
                    session.account,
                    args=(pending.token_id,),
                )
            except JokeBridgeError as exc:
                logger.error("Burn of token %s failed: %s", pending.token_id, exc)
                raise TransactionFailedError(
                    f"Bridge paid but burning token {pending.token_id} failed",
                    method="burn",
                    tx_hash=getattr(exc, "tx_hash", None),
                    details={"token_id": pending.token_id, "error": exc.message},
                ) from exc

            if self._pending == pending:
                self._pending = None
            self._paid_token_id = None
            logger.info("Burned token %s (tx %s)", pending.token_id, burn.tx_hash)

            notified = False
            if self._notifier is not None:
                notified = await asyncio.to_thread(self._notifier.notify, pending.joke)
        finally:
            self._bridging = False

        return BridgeResult(
            token_id=pending.token_id,
            payment_tx_hash=payment_hash,
            burn_tx_hash=burn.tx_hash,
            notified=notified,
        )


def _arg(event: Any, name: str) -> str:
    try:
        return str(event["args"][name])
    except (KeyError, TypeError):
        return ""
