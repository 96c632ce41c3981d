from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RAZORPAY_API_BASE = "https://api.razorpay.com/v1"
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_BODY_SIZE = 100 * 1024  # 100 kB limit


class Settings(BaseSettings):
    """Process configuration, read from the environment (and `.env` if present)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    razor_key_id: str | None = None
    razor_key_secret: str | None = None
    razor_webhook_secret: str | None = None

    allowed_origin: str = "*"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    razorpay_api_base: str = DEFAULT_RAZORPAY_API_BASE
    provider_timeout_seconds: float = Field(default=DEFAULT_PROVIDER_TIMEOUT_SECONDS, gt=0)
    link_description: str = "Payment to me (demo)"
    max_body_size: int = Field(default=DEFAULT_MAX_BODY_SIZE, gt=0)  # bytes

    log_level: str = "INFO"
