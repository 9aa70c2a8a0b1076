import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import BaseModel, ConfigDict


class InvalidPrivateKeyError(ValueError):
    pass


class SigningIdentity(BaseModel):
    """The one account every transfer of a script run is signed with."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    account: LocalAccount

    @property
    def address(self) -> str:
        return self.account.address

    @classmethod
    def from_private_key(cls, private_key: str) -> "SigningIdentity":
        private_key = private_key.strip()
        if not private_key:
            raise InvalidPrivateKeyError("Private key is required")

        # Ensure proper format
        if not private_key.startswith("0x"):
            private_key = f"0x{private_key}"

        try:
            account = Account.from_key(private_key)
        except Exception as exc:
            raise InvalidPrivateKeyError(f"Invalid private key: {exc}") from exc
        return cls(account=account)


def _fernet(password: str) -> Fernet:
    # Derive a key from the password
    key = hashlib.sha256(password.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(key))


def encrypt_private_key(private_key: str, password: str) -> str:
    return _fernet(password).encrypt(private_key.encode("utf-8")).decode("utf-8")


def decrypt_private_key(cipher_text: str, password: str) -> str:
    """
    Decrypt a private key produced by `encrypt_private_key`.

    :param cipher_text: The Fernet token stored in CIPHER_TEXT
    :param password: The password the key was encrypted with

    :return: The plain private key
    """
    try:
        return _fernet(password).decrypt(cipher_text.encode("utf-8")).decode("utf-8")
    except InvalidToken as exc:
        raise InvalidPrivateKeyError("Failed to decrypt cipher text: wrong password?") from exc
