"""Example: Show withdrawable rewards, GNO balance and validator count."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from gnosis_rewards import AppController, AppState, ClientConfig, Web3Provider

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("check_rewards")


def render(state: AppState) -> None:
    if state.is_loading or state.lookup.is_looking_up:
        return
    if state.message.text:
        logger.info("[%s] %s", state.message.kind.value, state.message.text)


async def main() -> None:
    """Print reward data for the configured account and an optional lookup address."""
    config = ClientConfig.from_env()

    private_key = os.getenv("PRIVATE_KEY")
    provider = Web3Provider(private_key, config.rpc_url) if private_key else None

    controller = AppController.create(config, provider=provider, render=render)
    try:
        await controller.start()
        state = controller.state
        logger.info("Connection: %s", state.connection_status)

        if state.account:
            logger.info("Account: %s", state.account)
            logger.info("Rewards to date: %s GNO", state.withdrawable_amount)
            logger.info("GNO balance: %s GNO", state.token_balance)
            logger.info("Validators: %d", state.validator_count)
        else:
            logger.info("No wallet connected; set PRIVATE_KEY to read your own account")

        lookup_address = os.getenv("LOOKUP_ADDRESS")
        if lookup_address:
            await controller.lookup(lookup_address)
            lookup = state.lookup
            logger.info("Lookup %s", lookup.address)
            logger.info("  Rewards to date: %s GNO", lookup.withdrawable_amount)
            logger.info("  GNO balance: %s GNO", lookup.token_balance)
            logger.info("  Validators: %d", lookup.validator_count)
    finally:
        controller.close()


if __name__ == "__main__":
    asyncio.run(main())
