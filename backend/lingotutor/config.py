from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".lingotutor" / "data"
    sqlite_filename: str = "lingotutor.db"
    session_size: int = 20  # cards per review session
    session_ttl_minutes: int = 360  # unfinished sessions older than this are dropped

    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("LINGOTUTOR_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_version: str = "2023-06-01"
    tutor_model: str = "claude-3-5-sonnet-20241022"
    tutor_max_tokens: int = 1000
    tutor_timeout: float = 60.0

    cors_origins: list[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 0  # 0 = pick a free port
    log_level: str = "info"

    model_config = {"env_prefix": "LINGOTUTOR_", "populate_by_name": True}


settings = Settings()
