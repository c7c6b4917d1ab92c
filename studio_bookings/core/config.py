from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    DATA_DIR: str = "./data"
    SEED_RESOURCES_FILE: str | None = None

    DEFAULT_TIMEZONE: str = "America/New_York"
    DEFAULT_QUERY_DAYS: int = 30

    # Comma-separated booking statuses that block time
    OCCUPYING_STATUSES: str = "pending,confirmed"
    INITIAL_BOOKING_STATUS: str = "pending"

    @property
    def occupying_statuses(self) -> list[str]:
        return [s.strip() for s in self.OCCUPYING_STATUSES.split(",") if s.strip()]


settings = Settings()
