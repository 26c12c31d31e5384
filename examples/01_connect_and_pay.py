"""Example: Connect a wallet, pay the service contract and print the joke."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from joke_bridge import ClientConfig, JokeBridgeClient

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("connect_and_pay")


async def main() -> None:
    client = JokeBridgeClient(ClientConfig.from_env())

    connected = await client.connect()
    if not connected.success:
        logger.error("Could not connect: %s (%s)", connected.error, connected.error_kind)
        return
    logger.info("Connected as %s", connected.account)

    try:
        cost = await client.service_cost()
        balance = await client.contract_balance()
        if cost.success and balance.success:
            logger.info(
                "Service cost %s wei, contract balance %s wei", cost.amount, balance.amount
            )

        paid = await client.pay_for_joke()
        if not paid.success:
            logger.error("Payment failed: %s", paid.error)
            return

        logger.info("Paid %s wei (tx %s)", paid.amount, paid.transaction_hash)
        if paid.joke is not None:
            logger.info("  %s", paid.joke.setup)
            logger.info("  %s", paid.joke.punchline)
    finally:
        client.disconnect()
        logger.info("Disconnected")


if __name__ == "__main__":
    asyncio.run(main())
