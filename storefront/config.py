"""Application settings using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Storefront API"
    debug: bool = False
    environment: str = "local"  # local, development, production
    log_format: str = "console"  # console, json

    # Hosted relational backend (Supabase PostgREST)
    # NOTE: Defaults intentionally blank so non-local environments must explicitly configure.
    supabase_url: str = ""
    supabase_key: str = ""

    # Outbound HTTP
    http_request_timeout_seconds: float = 15.0

    # Query engine defaults (per-binding overrides are allowed)
    query_stale_seconds: float = 60.0
    query_refetch_on_focus: bool = True

    # Shared cache store
    cache_max_entries: int = 1000
    cache_catalog_ttl_seconds: float = 24 * 60 * 60
    cache_currency_ttl_seconds: float = 60 * 60

    # Currency conversion collaborators
    geolocation_base_url: str = "https://ipapi.co"
    exchange_rate_base_url: str = "https://api.exchangerate.host"

    # Catalog paging
    product_page_size: int = 24
    featured_products_limit: int = 8
    similar_products_limit: int = 6

    @property
    def supabase_rest_url(self) -> str:
        """Base URL of the PostgREST endpoint."""
        return f"{self.supabase_url.rstrip('/')}/rest/v1"


settings = Settings()
