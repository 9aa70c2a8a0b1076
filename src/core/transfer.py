from decimal import Decimal, InvalidOperation
from typing import Callable

import click
from loguru import logger
from web3 import Web3

from core.batch import build_intent
from core.config import setting
from core.console import ConfirmationSource
from core.wallet import SigningIdentity
from schema import FeeEstimate, Receipt, TransferRequest


class TransferAbortedError(Exception):
    pass


def format_tao(wei: int) -> str:
    return f"{Web3.from_wei(wei, 'ether')} {setting.token_symbol}"


def parse_transfer_details(receiver_address: str, amount_input: str) -> TransferRequest:
    """Validate the receiver address and amount typed by the user."""
    receiver_address = receiver_address.strip()
    if not Web3.is_address(receiver_address):
        raise TransferAbortedError("Invalid receiver address")

    try:
        request = TransferRequest(recipient_address=receiver_address, amount=Decimal(amount_input.strip()))
        request.to_wei()
    except (InvalidOperation, ValueError) as exc:
        raise TransferAbortedError(f"Invalid amount: {exc}") from exc
    return request


def prompt_transfer_details() -> TransferRequest:
    click.echo("\nTransfer Details:")
    receiver_address = click.prompt("Enter receiver address", default="", show_default=False)
    amount_input = click.prompt(
        f"Enter amount to transfer (in {setting.token_symbol})", default="", show_default=False
    )
    return parse_transfer_details(receiver_address, amount_input)


async def check_balance(client, identity: SigningIdentity) -> int:
    try:
        balance = await client.get_balance(identity.address)
    except Exception as exc:
        raise TransferAbortedError(f"Failed to check balance: {exc}") from exc
    click.echo(f"Current balance: {format_tao(balance)}")
    return balance


async def estimate_fee(client, request: TransferRequest) -> FeeEstimate:
    intent = build_intent(request, setting.gas_limit)
    try:
        gas = await client.estimate_gas(intent)
        gas_price = await client.get_fee_data()
    except Exception as exc:
        raise TransferAbortedError(f"Failed to estimate gas: {exc}") from exc

    estimate = FeeEstimate(gas=gas, gas_price=gas_price)
    click.echo(f"Estimated gas: {estimate.gas}")
    click.echo(f"Estimated fee: {format_tao(estimate.fee)}")
    return estimate


async def preflight_check(client, request: TransferRequest, balance: int) -> FeeEstimate:
    """
    Refuse transfers the sender cannot pay for.

    :param client: The transaction client bound to the sender
    :param request: The transfer about to be confirmed
    :param balance: The sender balance in wei

    :return FeeEstimate: gas and gas price used for the decision
    """
    amount_wei = request.to_wei()
    if balance < amount_wei:
        raise TransferAbortedError("Insufficient balance for transfer")

    estimate = await estimate_fee(client, request)
    if balance < amount_wei + estimate.fee:
        raise TransferAbortedError("Insufficient balance for transfer including gas fees")
    return estimate


async def perform_transfer(client, request: TransferRequest) -> Receipt:
    click.echo("\nPerforming transfer...")
    try:
        pending = await client.send_transaction(build_intent(request, setting.gas_limit))
        click.echo("Transaction sent!")
        click.echo(f"Transaction hash: {pending.hash}")
        click.echo(f"Explorer: {setting.explorer_url}{pending.hash}")

        receipt = await pending.wait()
    except Exception as exc:
        raise TransferAbortedError(f"Transfer failed: {exc}") from exc

    if receipt.succeeded:
        logger.info(f"Transaction {receipt.hash} confirmed in block {receipt.block_number}")
        click.echo("Transaction confirmed!")
        click.echo(f"Block number: {receipt.block_number}")
        click.echo(f"Gas used: {receipt.gas_used}")
        click.echo(f"Transaction fee: {format_tao(receipt.fee)}")
    else:
        logger.warning(f"Transaction {receipt.hash} reverted in block {receipt.block_number}")
        click.echo("Transaction failed")
    return receipt


def show_summary(identity: SigningIdentity, request: TransferRequest, receipt: Receipt):
    click.echo("\nTransfer Summary:")
    click.echo(f"From: {identity.address}")
    click.echo(f"To: {request.recipient_address}")
    click.echo(f"Amount: {request.amount} {setting.token_symbol}")
    click.echo(f"Status: {'Success' if receipt.succeeded else 'Failed'}")
    click.echo(f"Transaction Hash: {receipt.hash}")
    click.echo(f"Block Number: {receipt.block_number}")
    click.echo(f"Gas Used: {receipt.gas_used}")


async def run_transfer(
    client,
    identity: SigningIdentity,
    confirmation: ConfirmationSource,
    read_details: Callable[[], TransferRequest] = prompt_transfer_details,
) -> Receipt | None:
    """Single interactive transfer. Returns None when the user cancels."""
    balance = await check_balance(client, identity)
    request = read_details()
    estimate = await preflight_check(client, request, balance)
    amount_wei = request.to_wei()

    click.echo("\nTransfer Confirmation:")
    click.echo("-" * 25)
    click.echo(f"From: {identity.address}")
    click.echo(f"To: {request.recipient_address}")
    click.echo(f"Amount: {request.amount} {setting.token_symbol}")
    click.echo(f"Estimated Fee: {format_tao(estimate.fee)}")
    click.echo(f"Total Deduction: {format_tao(amount_wei + estimate.fee)}")

    if not confirmation.confirm("\nConfirm transfer?"):
        click.echo("Transfer cancelled")
        return None

    receipt = await perform_transfer(client, request)
    show_summary(identity, request, receipt)
    return receipt
