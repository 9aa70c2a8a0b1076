from typing import Protocol

import click
from loguru import logger

from core.config import setting
from core.wallet import SigningIdentity, decrypt_private_key


class ConfirmationSource(Protocol):
    def confirm(self, prompt: str) -> bool: ...


class ConsoleConfirmation:
    """Asks on the terminal; only `yes` or `y` proceed."""

    def confirm(self, prompt: str) -> bool:
        answer = click.prompt(f"{prompt} (yes/no)", default="", show_default=False)
        return answer.strip().lower() in ("yes", "y")


def prompt_signing_identity(cipher_text: str | None = None) -> SigningIdentity:
    """
    Load the sender identity interactively.

    When a cipher text is configured only its password is asked for,
    otherwise the raw private key is. Both prompts hide the input.
    """
    cipher_text = cipher_text if cipher_text is not None else setting.cipher_text
    if cipher_text:
        password = click.prompt("Please enter your password", hide_input=True)
        private_key = decrypt_private_key(cipher_text, password)
        logger.info("Password is correct. Successfully decrypted the cipher text")
    else:
        private_key = click.prompt(
            "Enter sender private key", hide_input=True, default="", show_default=False
        )

    identity = SigningIdentity.from_private_key(private_key)
    click.echo("Wallet loaded successfully")
    click.echo(f"Sender address: {identity.address}")
    return identity
