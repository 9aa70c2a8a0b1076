from types import SimpleNamespace

import pytest
from web3 import Web3

from core.client import FinalityError, SubmissionError, Web3TransactionClient
from core.wallet import SigningIdentity
from fakes import ADDRESS_A, PRIVATE_KEY
from schema import TransferIntent

TX_HASH = b"\x12" * 32


async def _value(value):
    return value


class FakeEth:
    def __init__(self, send_error=None, wait_error=None):
        self.send_error = send_error
        self.wait_error = wait_error
        self.raw_transactions = []

    @property
    def gas_price(self):
        return _value(Web3.to_wei(10, "gwei"))

    async def get_transaction_count(self, address, block_identifier):
        return 3

    async def send_raw_transaction(self, raw):
        if self.send_error:
            raise self.send_error
        self.raw_transactions.append(raw)
        return TX_HASH

    async def wait_for_transaction_receipt(self, tx_hash, timeout):
        if self.wait_error:
            raise self.wait_error
        return {
            "transactionHash": TX_HASH,
            "status": 1,
            "gasUsed": 21000,
            "blockNumber": 42,
            "effectiveGasPrice": Web3.to_wei(10, "gwei"),
        }


def make_client(eth: FakeEth) -> Web3TransactionClient:
    identity = SigningIdentity.from_private_key(PRIVATE_KEY)
    return Web3TransactionClient(SimpleNamespace(eth=eth), identity, chain_id=945, receipt_timeout=5)


INTENT = TransferIntent(to=ADDRESS_A, value=Web3.to_wei(1, "ether"), gas_limit=21000)


@pytest.mark.anyio
async def test_send_and_wait():
    eth = FakeEth()
    pending = await make_client(eth).send_transaction(INTENT)
    receipt = await pending.wait()

    assert len(eth.raw_transactions) == 1
    assert pending.hash == "0x" + "12" * 32
    assert receipt.hash == pending.hash
    assert receipt.succeeded
    assert receipt.block_number == 42
    assert receipt.fee == 21000 * Web3.to_wei(10, "gwei")


@pytest.mark.anyio
async def test_send_failure_raises_submission_error():
    eth = FakeEth(send_error=ValueError("insufficient funds for gas * price + value"))

    with pytest.raises(SubmissionError, match="insufficient funds"):
        await make_client(eth).send_transaction(INTENT)


@pytest.mark.anyio
async def test_wait_failure_raises_finality_error():
    eth = FakeEth(wait_error=TimeoutError("not in chain after 5 seconds"))
    pending = await make_client(eth).send_transaction(INTENT)

    with pytest.raises(FinalityError) as excinfo:
        await pending.wait()

    assert excinfo.value.transaction_hash == pending.hash
    assert pending.hash in str(excinfo.value)
