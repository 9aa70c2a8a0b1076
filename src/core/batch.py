import asyncio
from typing import Awaitable, Callable, Sequence

import click
from loguru import logger

from core.client import TransactionClient
from core.config import setting
from schema import TransferIntent, TransferOutcome, TransferRequest, TransferStatus


def build_intent(request: TransferRequest, gas_limit: int) -> TransferIntent:
    """Plain value transfer of `request.amount` TAO. Raises ValueError for a bad address or amount."""
    return TransferIntent(
        to=request.check_address(),
        value=request.to_wei(),
        gas_limit=gas_limit,
    )


class BatchTransferRunner:
    """
    Send a list of transfers one after another from a single signer.

    Items are never submitted concurrently: transactions from the same account
    must go out in nonce order. A failing item is recorded as an `Error`
    outcome and the remaining items are still attempted.
    """

    def __init__(
        self,
        gas_limit: int | None = None,
        delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        symbol: str | None = None,
    ):
        self.gas_limit = gas_limit if gas_limit is not None else setting.gas_limit
        self.delay = delay if delay is not None else setting.transfer_delay
        self.sleep = sleep
        self.symbol = symbol or setting.token_symbol

    async def transfer(self, request: TransferRequest, client: TransactionClient) -> TransferOutcome:
        try:
            pending = await client.send_transaction(build_intent(request, self.gas_limit))
            click.echo(f"   Hash: {pending.hash}")
            receipt = await pending.wait()
        except Exception as exc:
            logger.error(f"Transfer to {request.recipient_address} failed: {exc}")
            return TransferOutcome.from_error(request, exc)

        outcome = TransferOutcome.from_receipt(request, receipt)
        if outcome.status == TransferStatus.FAILED:
            logger.warning(f"Transaction {receipt.hash} reverted in block {receipt.block_number}")
        else:
            logger.info(f"Transaction {receipt.hash} confirmed in block {receipt.block_number}")
        return outcome

    async def run(self, requests: Sequence[TransferRequest], client: TransactionClient) -> list[TransferOutcome]:
        results: list[TransferOutcome] = []

        for index, request in enumerate(requests):
            click.echo(f"\nTransfer {index + 1}/{len(requests)}:")
            click.echo(f"   To: {request.recipient_address}")
            click.echo(f"   Amount: {request.amount} {self.symbol}")

            outcome = await self.transfer(request, client)
            results.append(outcome)
            if outcome.status == TransferStatus.ERROR:
                click.echo(f"   Error: {outcome.error_message}")
            else:
                click.echo(f"   Status: {outcome.status.value}")

            # Delay between transfers to avoid rate limiting
            if index < len(requests) - 1:
                click.echo(f"Waiting {self.delay:g} seconds...")
                await self.sleep(self.delay)

        return results
