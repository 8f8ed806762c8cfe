"""
# Configuration Management Module

This module provides the **configuration system** for the Life Lessons API. It is built on
**Pydantic Settings**, giving typed, validated settings loaded from the environment and an
optional configuration file.

## Configuration Loading Hierarchy

```
┌─────────────────────────────────────────────────────────────┐
│  (Higher layers override lower layers)                      │
├─────────────────────────────────────────────────────────────┤
│  1. Environment Variables (HIGHEST PRIORITY)                │
├─────────────────────────────────────────────────────────────┤
│  2. LIFE_LESSONS_CONFIG_PATH                                │
│     - Custom config file path from env var                  │
├─────────────────────────────────────────────────────────────┤
│  3. .env File (Project Root)                                │
├─────────────────────────────────────────────────────────────┤
│  4. Default Values (LOWEST PRIORITY)                        │
└─────────────────────────────────────────────────────────────┘
```

If no configuration file is found the application runs in **environment-only mode**.

## Configuration Groups

| Group | Purpose |
|-------|---------|
| **Server** | Host, port, debug mode, request timeout |
| **Database (MongoDB)** | Connection URL, database name, credentials, timeouts |
| **CORS** | Allowed frontend origins |
| **Identity** | Bearer token secret or JWKS URL, algorithm, audience, issuer, admin emails |
| **Lessons** | Default author name and avatar |
| **Payments** | Razorpay credentials, fixed price and exchange rate |
| **Observability** | Log level, Prometheus toggle |

## Secret Management

Secrets (`MONGODB_PASSWORD`, `IDENTITY_TOKEN_SECRET`, `RAZORPAY_KEY_SECRET`) use Pydantic's
`SecretStr` so they never show up in logs or reprs.

## Usage

```python
from life_lessons.config import settings

print(settings.MONGODB_DATABASE)
for origin in settings.cors_origin_list:
    ...
```

Attributes:
    CONFIG_PATH (Optional[str]): The config file in use, or `None` in environment-only mode.
    settings (Settings): The global settings instance.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Set

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "LIFE_LESSONS_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path based on a predefined precedence order.

    1.  **Environment Variable**: `LIFE_LESSONS_CONFIG_PATH` (if set and the file exists).
    2.  **Dotenv Config**: `.env` file in the project root directory.
    3.  **Fallback**: `None`, which triggers environment-variable-only mode.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=False)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    Every value can be overridden by an environment variable of the same name. Validators
    reject an empty MongoDB URL, non-positive timeouts and a non-positive exchange rate, so a
    misconfigured deployment fails at import time instead of on the first request.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    DEBUG: bool = False
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # MongoDB configuration
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "life-lessonsDB"
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[SecretStr] = None
    MONGODB_CONNECTION_TIMEOUT: int = 10000  # ms
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000  # ms
    MONGODB_SOCKET_TIMEOUT: int = 20000  # ms
    MONGODB_MAX_POOL_SIZE: int = 50
    MONGODB_MIN_POOL_SIZE: int = 5

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:5174"
    CLIENT_URL: str = "http://localhost:5173"

    # Identity verification
    IDENTITY_TOKEN_SECRET: SecretStr = SecretStr("")
    IDENTITY_TOKEN_ALGORITHM: str = "HS256"
    IDENTITY_TOKEN_AUDIENCE: Optional[str] = None
    IDENTITY_TOKEN_ISSUER: Optional[str] = None
    IDENTITY_JWKS_URL: Optional[str] = None  # RS256 providers with rotating keys
    IDENTITY_JWKS_CACHE_SECONDS: int = 3600
    ADMIN_EMAILS: str = ""  # Comma-separated

    # Lesson defaults
    DEFAULT_AUTHOR_NAME: str = "Anonymous"
    DEFAULT_AUTHOR_AVATAR: str = "/images/default-avatar.png"

    # Payments (Razorpay hosted payment links)
    RAZORPAY_KEY_ID: str = "rzp_test_PLACEHOLDER_KEY_ID"
    RAZORPAY_KEY_SECRET: SecretStr = SecretStr("PLACEHOLDER_KEY_SECRET")
    PREMIUM_PRICE_LOCAL: Decimal = Decimal("1500")
    LOCAL_CURRENCY: str = "BDT"
    SETTLEMENT_CURRENCY: str = "USD"
    LOCAL_PER_SETTLEMENT_UNIT: Decimal = Decimal("120")  # 1 USD = 120 BDT
    PAYMENT_PROVIDER_TIMEOUT_SECONDS: float = 15.0

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True

    @field_validator("MONGODB_URL", mode="before")
    @classmethod
    def no_empty_urls(cls, v: Any, info: Any) -> Any:
        """
        Validates that the MongoDB URL is not empty.

        Raises:
            ValueError: If the URL is empty or whitespace.
        """
        if not v or not str(v).strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator(
        "REQUEST_TIMEOUT_SECONDS",
        "PAYMENT_PROVIDER_TIMEOUT_SECONDS",
        "MONGODB_CONNECTION_TIMEOUT",
        "MONGODB_SERVER_SELECTION_TIMEOUT",
        "MONGODB_SOCKET_TIMEOUT",
        mode="after",
    )
    @classmethod
    def validate_timeout_values(cls, v: Any, info: Any) -> Any:
        """Timeouts must be strictly positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("LOCAL_PER_SETTLEMENT_UNIT", "PREMIUM_PRICE_LOCAL", mode="after")
    @classmethod
    def validate_positive_amounts(cls, v: Decimal, info: Any) -> Decimal:
        """Prices and exchange rates must be strictly positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        """`CORS_ORIGINS` split into a list, blanks dropped."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def admin_email_set(self) -> Set[str]:
        """Lower-cased admin emails from `ADMIN_EMAILS`."""
        return {email.strip().lower() for email in self.ADMIN_EMAILS.split(",") if email.strip()}

    @property
    def is_production(self) -> bool:
        return not self.DEBUG


# Global settings instance
settings: Settings = Settings()
