from typing import Protocol

from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from core.config import setting
from core.wallet import SigningIdentity
from schema import Receipt, TransferIntent


class TransferClientError(Exception):
    pass


class SubmissionError(TransferClientError):
    """The transaction could not be signed or broadcast."""


class FinalityError(TransferClientError):
    """The transaction was broadcast but no receipt was obtained."""

    def __init__(self, message: str, transaction_hash: str):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class PendingTransaction(Protocol):
    hash: str

    async def wait(self) -> Receipt: ...


class TransactionClient(Protocol):
    async def send_transaction(self, intent: TransferIntent) -> PendingTransaction: ...


async def connect(rpc_url: str | None = None) -> tuple[AsyncWeb3, int]:
    """Open the JSON-RPC provider and check the node answers. Returns the client and its chain id."""
    rpc_url = rpc_url or setting.rpc_url
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    try:
        chain_id = await w3.eth.chain_id
    except Exception as exc:
        raise TransferClientError(f"Failed to connect to network: {exc}") from exc

    if chain_id != setting.chain_id:
        logger.warning(f"Connected chain id {chain_id} differs from configured {setting.chain_id}")
    return w3, chain_id


class Web3PendingTransaction:
    def __init__(self, w3: AsyncWeb3, tx_hash: bytes, timeout: float):
        self.w3 = w3
        self.hash = Web3.to_hex(tx_hash)
        self.timeout = timeout

    async def wait(self) -> Receipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(self.hash, timeout=self.timeout)
        except Exception as exc:
            logger.warning(f"No receipt for {self.hash}, it may still land on-chain: {exc}")
            raise FinalityError(
                f"Failed waiting for receipt of {self.hash}: {exc}", self.hash
            ) from exc

        return Receipt(
            hash=Web3.to_hex(receipt["transactionHash"]),
            status=receipt["status"],
            gas_used=receipt["gasUsed"],
            block_number=receipt["blockNumber"],
            gas_price=receipt.get("effectiveGasPrice", 0),
        )


class Web3TransactionClient:
    """Signs transfers locally with one identity and broadcasts them over JSON-RPC."""

    def __init__(self, w3: AsyncWeb3, identity: SigningIdentity, chain_id: int, receipt_timeout: float):
        self.w3 = w3
        self.identity = identity
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_settings(cls, w3: AsyncWeb3, identity: SigningIdentity, chain_id: int) -> "Web3TransactionClient":
        return cls(w3, identity, chain_id, setting.receipt_timeout)

    async def get_balance(self, address: str) -> int:
        return await self.w3.eth.get_balance(Web3.to_checksum_address(address))

    async def estimate_gas(self, intent: TransferIntent) -> int:
        return await self.w3.eth.estimate_gas({
            "from": self.identity.address,
            "to": Web3.to_checksum_address(intent.to),
            "value": intent.value,
        })

    async def get_fee_data(self) -> int:
        """Current gas price in wei."""
        return await self.w3.eth.gas_price

    async def send_transaction(self, intent: TransferIntent) -> Web3PendingTransaction:
        try:
            nonce = await self.w3.eth.get_transaction_count(self.identity.address, "pending")
            tx = {
                "to": Web3.to_checksum_address(intent.to),
                "value": intent.value,
                "gas": intent.gas_limit,
                "gasPrice": await self.get_fee_data(),
                "nonce": nonce,
                "chainId": self.chain_id,
            }
            signed = self.identity.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            raise SubmissionError(str(exc) or exc.__class__.__name__) from exc

        logger.info(f"Broadcast transaction {Web3.to_hex(tx_hash)} (nonce {nonce}) to {intent.to}")
        return Web3PendingTransaction(self.w3, tx_hash, self.receipt_timeout)
