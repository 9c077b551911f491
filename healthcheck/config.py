from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Probe definitions (absolute or relative to CWD)
    checks_file: str = "healthchecks.yaml"

    # Evaluation
    max_concurrent_checks: int = 0  # 0 = one thread per check
    evaluation_timeout: float = 0.0  # seconds, 0 = wait for every check

    # Logging
    log_level: str = "INFO"


settings = Settings()
