"""Utility functions for the joke bridge client."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes

from .exceptions import ValidationError


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt


def encode_joke_token_uri(setup: str, punchline: str) -> str:
    """Pack a joke into the single token URI string stored by the NFT contract.

    Every space-separated word of ``"{setup} ___ {punchline}"`` is followed by an
    underscore, so ``"Why? ___ Because."`` becomes ``"Why?_____Because._"``.
    """
    if not setup.strip() or not punchline.strip():
        raise ValidationError(
            "Joke must have both a setup and a punchline",
            field="joke",
            value=(setup, punchline),
        )

    text = f"{setup} ___ {punchline}"
    return "".join(f"{word}_" for word in text.split(" "))


def parse_chain_id(value: Any) -> int:
    """Decode an ``eth_chainId`` result, accepting hex strings and integers."""
    if isinstance(value, bool):
        raise ValidationError("Chain id must be numeric", field="chain_id", value=value)
    if isinstance(value, int):
        return value

    try:
        if isinstance(value, str) and value.lower().startswith("0x"):
            return int(value, 16)
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Chain id must be numeric", field="chain_id", value=value)


def rpc_error_fields(error: Any) -> tuple[int | None, str]:
    """Return ``(code, message)`` from a JSON-RPC error object or web3 exception."""
    if isinstance(error, BaseException):
        rpc_response = getattr(error, "rpc_response", None)
        if isinstance(rpc_response, Mapping) and isinstance(rpc_response.get("error"), Mapping):
            return rpc_error_fields(rpc_response["error"])
        if error.args and isinstance(error.args[0], Mapping):
            return rpc_error_fields(error.args[0])
        return None, str(error)

    if isinstance(error, Mapping):
        raw_code = error.get("code")
        try:
            code = int(raw_code) if raw_code is not None else None
        except (TypeError, ValueError):
            code = None
        return code, str(error.get("message", ""))

    return None, str(error)


def wei_to_ether_str(value_wei: int) -> str:
    """Render a wei amount as a plain ether string for logs."""
    whole, fraction = divmod(int(value_wei), 10**18)
    if not fraction:
        return str(whole)
    return f"{whole}.{fraction:018d}".rstrip("0")
