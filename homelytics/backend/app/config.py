from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    HOMELYTICS_DB_URL: str = "sqlite+aiosqlite:///./homelytics.db"

    # --- Minimal ops auth (API key) ---
    # Send: X-API-Key: <key>
    API_KEY: str | None = None

    # --- Upstream feed (RESO / OData, Trestle today) ---
    FEED_NAME: str = "trestle"
    FEED_BASE_URL: str = "https://api-trestle.corelogic.com/trestle/odata/Property"
    FEED_STATUS_FIELD: str = "MlsStatus"
    FEED_STATUS_VALUE: str = "Active"

    # --- OAuth2 client-credentials ---
    FEED_TOKEN_URL: str | None = None
    FEED_CLIENT_ID: str | None = None
    FEED_CLIENT_SECRET: str | None = None
    FEED_SCOPE: str | None = None
    TOKEN_REFRESH_BUFFER_S: int = 120

    # --- HTTP timeouts (seconds) ---
    HTTP_TOKEN_TIMEOUT_S: float = 20
    HTTP_COUNT_TIMEOUT_S: float = 25
    HTTP_PAGE_TIMEOUT_S: float = 45  # page includes upstream media expansion
    HTTP_ERROR_BODY_LIMIT: int = 500

    # --- Sync job ---
    SYNC_JOB_NAME: str = "listing_sync"
    SYNC_PAGE_SIZE: int = 200
    SYNC_LEASE_TTL_S: int = 900

    # --- Scheduler tuning ---
    SCHED_SYNC_INTERVAL_MINUTES: int = 15


settings = Settings()
