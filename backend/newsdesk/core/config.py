from pydantic_settings import BaseSettings
from typing import List, Union, Optional
from pydantic import field_validator


class Settings(BaseSettings):
    # Database
    POSTGRES_USER: str = "newsdesk"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "newsdesk"
    DATABASE_URI: Optional[str] = None  # Full URL override (e.g. sqlite for tests)

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from components."""
        if self.DATABASE_URI:
            return self.DATABASE_URI
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Application
    SECRET_KEY: str
    DEBUG: bool = False
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # Aggregation
    SCHEDULER_ENABLED: bool = True
    AGGREGATION_INTERVAL: int = 15  # minutes between due-source checks
    DEFAULT_FETCH_CADENCE_MINUTES: int = 360
    FETCH_TIMEOUT_SECONDS: float = 30.0  # total time allowed for one feed fetch
    FETCH_MAX_CONCURRENT: int = 5  # sources fetched in parallel per run
    FETCH_USER_AGENT: str = "newsdesk/1.0 (+https://github.com/newsdesk)"

    # Normalization
    SUMMARY_MAX_LENGTH: int = 200

    # Reads
    SEARCH_RESULT_LIMIT: int = 50
    RECOMMENDATION_LIMIT: int = 5

    # Digests
    DIGEST_MAX_ARTICLES: int = 10
    DIGEST_MIN_RELEVANCE: float = 0.5  # articles must score strictly above this
    DIGEST_CHECK_INTERVAL: int = 30  # minutes

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
