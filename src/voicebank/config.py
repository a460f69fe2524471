from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_INSTRUCTIONS = (
    "You are a helpful banking assistant. You can check balances, transfer funds, "
    "withdraw money, view history, and lock or unlock cards. Be concise."
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./bank.db"
    db_echo: bool = False
    seed_demo_data: bool = True
    default_user_id: str = "usr_000"

    # Realtime endpoint
    realtime_url: str = (
        "wss://example.openai.azure.com/openai/realtime"
        "?api-version=2024-10-01-preview&deployment=gpt-realtime"
    )
    realtime_api_key: str = ""
    # "azure" sends an api-key header, "openai" sends a bearer token
    realtime_auth_style: str = "azure"
    realtime_instructions: str = DEFAULT_INSTRUCTIONS

    # Tool dispatch
    tool_timeout_seconds: float = 10.0
    history_default_limit: int = 3
    history_max_limit: int = 50

    # Money / amounts
    currency: str = "USD"
    currency_minor_unit: int = 2
    new_account_balances: dict[str, str] = Field(
        default_factory=lambda: {"Checking": "1000.00", "Savings": "5000.00"}
    )


settings = Settings()
