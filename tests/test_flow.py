from __future__ import annotations

import asyncio

import pytest
from conftest import OTHER_CHAIN_ID, Stack, build_stack

from joke_bridge.constants import REQUIRED_CHAIN_ID
from joke_bridge.exceptions import (
    NotArmedError,
    NotConnectedError,
    TransactionFailedError,
    UnswitchableError,
    ValidationError,
)
from joke_bridge.types import JokePayload


def _connected() -> Stack:
    stack = build_stack()
    asyncio.run(stack.session.connect())
    return stack


def test_bridge_before_mint_is_not_armed() -> None:
    stack = _connected()
    calls_before = list(stack.wallet.calls)

    with pytest.raises(NotArmedError):
        asyncio.run(stack.flow.bridge_and_burn())

    assert stack.web3.chain.sent == []
    assert stack.wallet.calls == calls_before
    assert stack.notifier.jokes == []


def test_bridge_before_connect_is_not_armed() -> None:
    stack = build_stack()

    with pytest.raises(NotArmedError):
        asyncio.run(stack.flow.bridge_and_burn())

    assert stack.wallet.calls == []


def test_mint_records_pending_token(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(7)

    result = asyncio.run(stack.flow.mint(joke))

    assert result.token_id == 7
    assert result.explorer_url == stack.config.explorer_link(result.tx_hash)
    assert stack.flow.armed
    pending = stack.flow.pending_token
    assert pending is not None and pending.token_id == 7 and pending.joke == joke
    _, name, args, tx = stack.web3.chain.sent[0]
    assert name == "mint"
    assert args == ("Why_did_the_chicken_cross_the_road?_____To_get_to_the_other_side._",)
    assert "value" not in tx


def test_mint_without_transfer_event_fails(joke: JokePayload) -> None:
    stack = _connected()

    with pytest.raises(TransactionFailedError):
        asyncio.run(stack.flow.mint(joke))

    assert stack.flow.pending_token is None
    assert not stack.flow.armed


def test_mint_incomplete_joke_rejected_before_any_call() -> None:
    stack = _connected()

    with pytest.raises(ValidationError):
        asyncio.run(stack.flow.mint(JokePayload(setup="Why?", punchline="")))

    assert stack.web3.chain.sent == []


def test_mint_requires_connection(joke: JokePayload) -> None:
    stack = build_stack()

    with pytest.raises(NotConnectedError):
        asyncio.run(stack.flow.mint(joke))


def test_mint_then_bridge_burns_the_minted_token(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(42)

    async def scenario():
        minted = await stack.flow.mint(joke)
        assert stack.flow.pending_token.token_id == 42
        bridged = await stack.flow.bridge_and_burn()
        return minted, bridged

    minted, bridged = asyncio.run(scenario())

    assert bridged.token_id == 42
    assert bridged.payment_tx_hash is not None
    assert bridged.notified is True
    assert stack.flow.pending_token is None
    assert not stack.flow.armed
    assert stack.web3.chain.methods() == ["mint", "payService", "burn"]
    _, _, pay_args, pay_tx = stack.web3.chain.sent[1]
    assert pay_tx["value"] == stack.config.pricing.bridge_price_wei
    _, _, burn_args, _ = stack.web3.chain.sent[2]
    assert burn_args == (42,)
    assert stack.notifier.jokes == [joke]


def test_burn_failure_keeps_token_and_retry_only_burns(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(7)
    stack.nft.outcomes["burn"] = ["revert"]

    async def scenario():
        await stack.flow.mint(joke)
        with pytest.raises(TransactionFailedError) as excinfo:
            await stack.flow.bridge_and_burn()
        assert excinfo.value.method == "burn"
        assert stack.flow.pending_token.token_id == 7
        assert stack.flow.armed
        assert stack.notifier.jokes == []
        return await stack.flow.bridge_and_burn()

    retried = asyncio.run(scenario())

    assert retried.token_id == 7
    assert retried.payment_tx_hash is None
    assert stack.web3.chain.methods() == ["mint", "payService", "burn"]
    assert stack.flow.pending_token is None
    assert stack.notifier.jokes == [joke]


def test_failed_payment_keeps_token_and_skips_burn(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(9)
    stack.service.outcomes["payService"] = ["revert"]

    async def scenario() -> None:
        await stack.flow.mint(joke)
        with pytest.raises(TransactionFailedError):
            await stack.flow.bridge_and_burn()

    asyncio.run(scenario())

    assert stack.web3.chain.methods() == ["mint"]
    assert stack.flow.pending_token.token_id == 9


def test_second_mint_overwrites_pending_token(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.extend([1, 2])
    other = JokePayload(setup="Knock knock", punchline="Who is there")

    async def scenario() -> None:
        await stack.flow.mint(joke)
        await stack.flow.mint(other)
        await stack.flow.bridge_and_burn()

    asyncio.run(scenario())

    _, name, args, _ = stack.web3.chain.sent[-1]
    assert (name, args) == ("burn", (2,))
    assert stack.notifier.jokes == [other]


def test_bridge_racing_mint_sees_unarmed_state(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(5)

    async def scenario():
        mint_task = asyncio.create_task(stack.flow.mint(joke))
        await asyncio.sleep(0)
        bridge_result = await asyncio.gather(stack.flow.bridge_and_burn(), return_exceptions=True)
        await mint_task
        return bridge_result[0]

    outcome = asyncio.run(scenario())

    assert isinstance(outcome, NotArmedError)
    assert stack.flow.pending_token.token_id == 5
    assert "burn" not in stack.web3.chain.methods()


def test_concurrent_bridges_pay_once(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(11)

    async def scenario():
        await stack.flow.mint(joke)
        return await asyncio.gather(
            stack.flow.bridge_and_burn(), stack.flow.bridge_and_burn(), return_exceptions=True
        )

    first, second = asyncio.run(scenario())

    assert first.token_id == 11
    assert isinstance(second, NotArmedError)
    assert stack.web3.chain.methods().count("payService") == 1


def test_reset_disarms(joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(3)
    asyncio.run(stack.flow.mint(joke))

    stack.flow.reset()

    assert not stack.flow.armed
    assert stack.flow.pending_token is None


def test_mint_while_disconnected_reports_connection_first() -> None:
    stack = build_stack()

    with pytest.raises(NotConnectedError):
        asyncio.run(stack.flow.mint(JokePayload(setup="Why?", punchline="")))


def test_network_lost_after_payment_reports_failed_burn(monkeypatch, joke: JokePayload) -> None:
    stack = _connected()
    stack.nft.minted_token_ids.append(8)
    submit = stack.web3.chain.submit

    def submit_then_leave_network(contract, name, args, tx):
        tx_hash = submit(contract, name, args, tx)
        if name == "payService":
            stack.wallet.chain_id = OTHER_CHAIN_ID
            stack.wallet.known_chains = {OTHER_CHAIN_ID}
            stack.wallet.rejected.add("wallet_addEthereumChain")
        return tx_hash

    monkeypatch.setattr(stack.web3.chain, "submit", submit_then_leave_network)

    async def scenario():
        await stack.flow.mint(joke)
        with pytest.raises(TransactionFailedError) as excinfo:
            await stack.flow.bridge_and_burn()
        assert excinfo.value.method == "burn"
        assert isinstance(excinfo.value.__cause__, UnswitchableError)
        assert stack.flow.pending_token.token_id == 8

        stack.wallet.chain_id = REQUIRED_CHAIN_ID
        stack.wallet.rejected.clear()
        return await stack.flow.bridge_and_burn()

    retried = asyncio.run(scenario())

    assert retried.token_id == 8
    assert retried.payment_tx_hash is None
    assert stack.web3.chain.methods() == ["mint", "payService", "burn"]
