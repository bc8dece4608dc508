from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SUPABASE_URL = "your_supabase_project_url"
PLACEHOLDER_SUPABASE_KEY = "your_supabase_anon_key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_ENV: Literal["development", "production"] = "production"
    CORS_ORIGINS: str = "*"

    # Record store (Supabase REST + storage)
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_TABLE: str = "cv_profiles"
    SUPABASE_BUCKET: str = "CVs"
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_MAX_RETRIES: int = 3

    # External webhooks
    SEARCH_WEBHOOK_URL: str = "https://conchobar.app.n8n.cloud/webhook/getresults"
    SEARCH_TIMEOUT_SECONDS: float = 30.0
    UPLOAD_WEBHOOK_URL: str = "https://conchobar.app.n8n.cloud/webhook/2973003a-f866-4985-aca0-753e072b7432"
    UPLOAD_TIMEOUT_SECONDS: float = 120.0

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


def require_backend_config(config: Settings) -> tuple[str, str]:
    """Return the (url, key) pair for the record store or fail fast.

    Raises RuntimeError when either value is missing or still set to the
    placeholder from the sample environment file.
    """
    url = (config.SUPABASE_URL or "").strip()
    key = (config.SUPABASE_ANON_KEY or "").strip()

    if not url or not key:
        raise RuntimeError(
            "Missing Supabase configuration. Set SUPABASE_URL and SUPABASE_ANON_KEY in the environment or .env file."
        )
    if url == PLACEHOLDER_SUPABASE_URL or key == PLACEHOLDER_SUPABASE_KEY:
        raise RuntimeError(
            "Supabase configuration still uses placeholder values. "
            "Replace SUPABASE_URL and SUPABASE_ANON_KEY with your project's credentials."
        )
    return url.rstrip("/"), key


settings = Settings()
