"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./credit_gateway.db"
    ledger_backend: str = "memory"  # memory | sql

    # External Services
    explorer_api_base: str = "https://api-testnet.bscscan.com/api"
    explorer_api_key: str = "YourApiKeyToken"
    signer_url: str = "http://localhost:8003/transactions"
    signer_from_address: str | None = None

    # Chain
    chain_id: int = 97
    credit_vault_address: str = "0x5a26514ce0af943540407170b09cea03cbff5570"
    vault_transfer_value_wei: int = 100_000_000_000_000  # 0.0001 BNB per borrow/repay signal

    # Service
    service_name: str = "credit-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    history_page_size: int = 50

    # Scoring
    scoring_window_days: int = 30
    currency_rate: float = 600.0  # native currency -> USDT, fixed
    limit_alpha: float = 0.6
    limit_beta: float = 0.3
    limit_floor: float = 100.0
    limit_cap: float = 10_000.0

    # Ledger seed for never-seen wallets
    default_credit_limit: float = 500.0
    default_used: float = 50.0
    default_apr: float = 12.5


settings = Settings()
