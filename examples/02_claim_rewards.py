"""Example: Claim withdrawable validator rewards with a local signer."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from gnosis_rewards import AppController, ClientConfig, Web3Provider

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("claim_rewards")


async def main() -> None:
    """Connect, check rewards and submit a claim when anything is withdrawable."""
    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")

    config = ClientConfig.from_env()
    provider = Web3Provider(private_key, config.rpc_url, request_timeout=config.request_timeout)
    controller = AppController.create(config, provider=provider)

    try:
        await controller.start()
        if controller.state.account is None:
            await controller.connect()

        state = controller.state
        if state.message.text:
            logger.error("%s", state.message.text)
            return

        logger.info("Rewards to date: %s GNO", state.withdrawable_amount)
        if not state.has_rewards:
            logger.info("Nothing to claim")
            return

        tx_hash = await controller.claim()
        if tx_hash is None:
            logger.error("%s", state.message.text)
            return

        logger.info("Claim submitted: %s", tx_hash)
        logger.info("Waiting %.0fs for the post-claim refresh", config.claim_refresh_delay)
        await asyncio.sleep(config.claim_refresh_delay + 1)
        logger.info("Rewards after claim: %s GNO", state.withdrawable_amount)
    finally:
        controller.close()


if __name__ == "__main__":
    asyncio.run(main())
