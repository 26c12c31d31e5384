"""Transaction dispatch helpers for the joke bridge client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from ..constants import RPCErrorCode
from ..exceptions import (
    NotConnectedError,
    ProviderError,
    TransactionFailedError,
    UserRejectedError,
    ValidationError,
)
from ..types import Address, TxResult, Wei
from ..utils import rpc_error_fields, wei_to_ether_str
from .contracts import ContractHandle
from .network import NetworkGuard
from .session import ConnectionSession

logger = logging.getLogger(__name__)


class PaidActionExecutor:
    """Submit contract calls with attached value and wait for their receipts."""

    def __init__(
        self,
        session: ConnectionSession,
        guard: NetworkGuard,
        *,
        receipt_timeout: float,
    ) -> None:
        self._session = session
        self._guard = guard
        self._receipt_timeout = receipt_timeout

    async def pay_and_call(
        self,
        handle: ContractHandle,
        method: str,
        value_wei: Wei,
        account: Address,
        args: Sequence[Any] = (),
    ) -> TxResult:
        self._session.require()
        if not account:
            raise NotConnectedError("No wallet account available for the transaction")
        if value_wei < 0:
            raise ValidationError("Value must be non-negative", field="value_wei", value=value_wei)

        await self._guard.ensure_network()

        contract_function = handle.function(method, *args)
        tx_params: dict[str, Any] = {"from": account}
        if value_wei:
            tx_params["value"] = value_wei

        logger.info(
            "Dispatching %s.%s from %s (value=%s ETH)",
            handle.name,
            method,
            account,
            wei_to_ether_str(value_wei),
        )

        try:
            tx_hash = await contract_function.transact(tx_params)
        except Exception as exc:
            code, message = rpc_error_fields(exc)
            if code == RPCErrorCode.USER_REJECTED:
                raise UserRejectedError(
                    f"User rejected {method} transaction", code=code, method=method
                ) from exc
            raise TransactionFailedError(
                f"Failed to submit transaction for {method}",
                method=method,
                details={"args": list(args), "error": message},
            ) from exc

        tx_hex = HexBytes(tx_hash).to_0x_hex()
        logger.info("Transaction sent for %s hash=%s", method, tx_hex)

        web3 = handle.contract.w3
        try:
            receipt = await web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except TimeExhausted as exc:
            raise TransactionFailedError(
                f"Timed out waiting for {method} receipt",
                method=method,
                tx_hash=tx_hex,
                details={"timeout": self._receipt_timeout},
            ) from exc
        except Exception as exc:  # pragma: no cover - defensive
            raise TransactionFailedError(
                f"Failed to fetch {method} receipt",
                method=method,
                tx_hash=tx_hex,
                details={"error": str(exc)},
            ) from exc

        if not receipt:
            raise TransactionFailedError(
                f"Empty receipt for {method}", method=method, tx_hash=tx_hex
            )

        if receipt.get("status", 0) != 1:
            raise TransactionFailedError(
                f"Transaction {method} reverted",
                method=method,
                tx_hash=tx_hex,
                details={"block_number": receipt.get("blockNumber")},
            )

        block_number = receipt.get("blockNumber")
        logger.info("Transaction confirmed for %s hash=%s block=%s", method, tx_hex, block_number)
        return TxResult(
            method=method,
            tx_hash=tx_hex,
            value_wei=value_wei,
            block_number=block_number,
            receipt=receipt,
        )

    async def call(self, handle: ContractHandle, method: str, *args: Any) -> Any:
        """Run a read-only contract view."""

        self._session.require()
        try:
            return await handle.function(method, *args).call()
        except ValidationError:
            raise
        except Exception as exc:
            code, message = rpc_error_fields(exc)
            raise ProviderError(
                f"Contract view {handle.name}.{method} failed",
                code=code,
                method=method,
                details={"args": list(args), "error": message},
            ) from exc
