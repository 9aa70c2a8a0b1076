# Models with validation
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict
from web3 import Web3

NOT_AVAILABLE = "not available"


class TransferStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    ERROR = "Error"


class TransferRequest(BaseModel):
    """One configured or typed-in transfer. Checked when the intent is built."""

    model_config = ConfigDict(frozen=True)

    recipient_address: str
    amount: Decimal

    def check_address(self) -> str:
        if not Web3.is_address(self.recipient_address):
            raise ValueError(f"Invalid recipient address: {self.recipient_address}")
        return self.recipient_address

    def to_wei(self) -> int:
        """Amount in wei. Must be positive and a whole number of wei."""
        if not self.amount.is_finite() or self.amount <= 0:
            raise ValueError(f"Amount must be positive, got {self.amount}")

        value = Web3.to_wei(self.amount, "ether")
        # to_wei truncates below one wei
        if value == 0 or Web3.from_wei(value, "ether") != self.amount:
            raise ValueError(f"Amount {self.amount} has more than 18 decimals")
        return value


class TransferIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    to: str
    value: int  # in wei
    gas_limit: int


class Receipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    status: int
    gas_used: int
    block_number: int
    gas_price: int

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @property
    def fee(self) -> int:
        return self.gas_used * self.gas_price


class FeeEstimate(BaseModel):
    gas: int
    gas_price: int

    @property
    def fee(self) -> int:
        return self.gas * self.gas_price


class TransferOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipient: str
    amount: Decimal
    transaction_hash: str = NOT_AVAILABLE
    status: TransferStatus
    gas_used: str | None = None
    error_message: str | None = None

    @classmethod
    def from_receipt(cls, request: TransferRequest, receipt: Receipt) -> "TransferOutcome":
        return cls(
            recipient=request.recipient_address,
            amount=request.amount,
            transaction_hash=receipt.hash,
            status=TransferStatus.SUCCESS if receipt.succeeded else TransferStatus.FAILED,
            gas_used=str(receipt.gas_used),
        )

    @classmethod
    def from_error(cls, request: TransferRequest, error: Exception) -> "TransferOutcome":
        return cls(
            recipient=request.recipient_address,
            amount=request.amount,
            status=TransferStatus.ERROR,
            error_message=str(error) or error.__class__.__name__,
        )


class SummaryReport(BaseModel):
    """Aggregate view over the outcomes of a batch run."""

    outcomes: list[TransferOutcome]

    @property
    def successful(self) -> int:
        return sum(1 for o in self.outcomes if o.status == TransferStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def render(self, symbol: str = "TAO") -> str:
        """Human-readable summary followed by one block per outcome."""
        lines = [
            "Batch Transfer Summary:",
            "=" * 44,
            f"Successful transfers: {self.successful}",
            f"Failed transfers: {self.failed}",
            f"Total transfers: {self.total}",
            "",
            "Detailed Results:",
            "-" * 44,
        ]
        for index, outcome in enumerate(self.outcomes, start=1):
            lines.append(f"{index}. {outcome.recipient}")
            lines.append(f"   Amount: {outcome.amount} {symbol}")
            lines.append(f"   Status: {outcome.status.value}")
            lines.append(f"   Hash: {outcome.transaction_hash}")
            if outcome.error_message:
                lines.append(f"   Error: {outcome.error_message}")
            lines.append("")
        return "\n".join(lines)
