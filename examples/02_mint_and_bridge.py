"""Example: Pay for a joke, mint it as an NFT, then bridge and burn the NFT."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from joke_bridge import ClientConfig, JokeBridgeClient
from joke_bridge.types import Response

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("mint_and_bridge")


def _log_result(label: str, response: Response) -> bool:
    if response.success:
        logger.info("%s succeeded (tx %s)", label, response.transaction_hash)
        if response.token_id is not None:
            logger.info("  token id: %s", response.token_id)
        if response.explorer_url:
            logger.info("  explorer: %s", response.explorer_url)
        return True

    logger.error("%s failed [%s]: %s", label, response.error_kind, response.error)
    if response.raw_response:
        logger.debug("  context: %s", response.raw_response)
    return False


async def main() -> None:
    client = JokeBridgeClient(ClientConfig.from_env())

    if not _log_result("Connect", await client.connect()):
        return

    try:
        if not _log_result("Pay for joke", await client.pay_for_joke()):
            return
        if not _log_result("Mint", await client.mint_current_joke()):
            return

        logger.info("Bridge armed: %s", client.bridge_armed)
        bridged = await client.bridge()
        if _log_result("Bridge", bridged):
            logger.info("  notification sent: %s", bridged.notified)
        elif client.bridge_armed:
            logger.info("Token still pending; retrying burn")
            _log_result("Bridge retry", await client.bridge())
    finally:
        client.disconnect()
        logger.info("Disconnected")


if __name__ == "__main__":
    asyncio.run(main())
