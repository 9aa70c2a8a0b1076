from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    rpc_url: str = "https://test.chain.opentensor.ai"
    chain_id: int = 945
    network_name: str = "Bittensor Testnet"
    explorer_url: str = "https://test.chain.opentensor.ai/tx/"
    token_symbol: str = "TAO"

    # Standard gas limit for a plain value transfer
    gas_limit: int = 21000
    transfer_delay: float = 2.0
    receipt_timeout: float = 120

    cipher_text: str | None = None
    log_level: str = "INFO"

    # Example recipients for the batch script - modify as needed
    batch_recipients: list[tuple[str, Decimal]] = [
        ("0x1234567890123456789012345678901234567890", Decimal("0.1")),
        ("0x0987654321098765432109876543210987654321", Decimal("0.2")),
        ("0x1111111111111111111111111111111111111111", Decimal("0.15")),
    ]

setting = Settings()
