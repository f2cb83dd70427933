from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.currencies import CURRENCY_SYMBOLS


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, API_BASE_URL, HOME_CURRENCY, PAGE_SIZE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Dashboard"
    debug: bool = False
    version: str = "0.1.0"

    # Remote expense service
    api_base_url: str = "http://localhost:3000/api/v1"
    http_timeout_seconds: float = 10.0

    # Display
    home_currency: str = "INR"
    page_size: int = 10

    def init_post_load(self) -> None:
        """Normalize derived fields and validate display options."""
        self.api_base_url = self.api_base_url.rstrip("/")
        self.home_currency = self.home_currency.upper()
        if self.home_currency not in CURRENCY_SYMBOLS:
            raise ValueError(f"Unsupported home_currency '{self.home_currency}'")
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
