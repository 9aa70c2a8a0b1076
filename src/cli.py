import asyncio
import sys

import click
from loguru import logger

from core.batch import BatchTransferRunner
from core.client import Web3TransactionClient, connect
from core.config import setting
from core.console import ConsoleConfirmation, prompt_signing_identity
from core.transfer import format_tao, run_transfer
from core.wallet import SigningIdentity, encrypt_private_key
from schema import SummaryReport, TransferRequest


def configure_logging():
    logger.remove()
    logger.add(sys.stderr, level=setting.log_level)


def load_recipients() -> list[TransferRequest]:
    return [
        TransferRequest(recipient_address=address, amount=amount)
        for address, amount in setting.batch_recipients
    ]


async def _transfer():
    click.echo(f"{setting.token_symbol} Transfer Script for {setting.network_name}")
    click.echo(f"Network: {setting.network_name} (Chain ID: {setting.chain_id})")
    click.echo(f"RPC URL: {setting.rpc_url}")

    w3, chain_id = await connect()
    click.echo(f"Connected to network (Chain ID: {chain_id})")

    click.echo("\nPlease provide the following information:")
    identity = prompt_signing_identity()
    client = Web3TransactionClient.from_settings(w3, identity, chain_id)
    await run_transfer(client, identity, ConsoleConfirmation())


async def _batch_transfer():
    click.echo(f"Batch {setting.token_symbol} Transfer Script for {setting.network_name}")

    w3, chain_id = await connect()
    identity = prompt_signing_identity()
    client = Web3TransactionClient.from_settings(w3, identity, chain_id)

    balance = await client.get_balance(identity.address)
    click.echo(f"Balance: {format_tao(balance)}")

    recipients = load_recipients()
    click.echo("\nRecipients to transfer to:")
    for index, request in enumerate(recipients, start=1):
        click.echo(f"{index}. {request.recipient_address} - {request.amount} {setting.token_symbol}")

    if not ConsoleConfirmation().confirm("\nProceed with batch transfer?"):
        click.echo("Batch transfer cancelled")
        return

    click.echo("\nStarting batch transfers...")
    results = await BatchTransferRunner().run(recipients, client)
    click.echo("")
    click.echo(SummaryReport(outcomes=results).render(setting.token_symbol))


def _run(workflow):
    configure_logging()
    try:
        asyncio.run(workflow())
    except (click.Abort, KeyboardInterrupt):
        click.echo("\nCancelled")
    except Exception as exc:
        logger.error(f"Aborting: {exc}")
        click.echo(f"\nError: {exc}", err=True)
        sys.exit(1)


@click.group()
def cli():
    pass


@cli.command()
def transfer():
    """Transfer TAO to one address after balance and gas fee checks."""
    _run(_transfer)


@cli.command()
def batch_transfer():
    """Transfer TAO to the configured recipients one after another."""
    _run(_batch_transfer)


@cli.command()
@click.option('--private-key', type=str, prompt="Private key", hide_input=True, help='Sender private key')
@click.option('--password', type=str, prompt="Password to encrypt the private key", hide_input=True,
              confirmation_prompt=True, help='Password for the cipher text')
def generate_cipher_text(private_key: str, password: str):
    """Encrypt a private key for the CIPHER_TEXT setting."""
    try:
        identity = SigningIdentity.from_private_key(private_key)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--private-key")

    cipher_text = encrypt_private_key(private_key.strip(), password)
    click.echo(f"Encrypted key for {identity.address}")
    click.echo(f"CIPHER_TEXT={cipher_text}")

    return cipher_text


if __name__ == "__main__":
    cli()
