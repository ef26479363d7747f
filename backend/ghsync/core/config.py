"""Configuration settings for the ghsync backend.

Wraps environment variables and provides defaults.
"""

from typing import Optional

from pydantic import PostgresDsn, ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class.

    Attributes:
    ----------
        PROJECT_NAME (str): The name of the project.
        LOCAL_DEVELOPMENT (bool): Whether the application is running locally.
        LOG_LEVEL (str): The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        POSTGRES_HOST (str): The PostgreSQL server hostname.
        POSTGRES_PORT (int): The PostgreSQL server port.
        POSTGRES_DB (str): The PostgreSQL database name.
        POSTGRES_USER (str): The PostgreSQL username.
        POSTGRES_PASSWORD (str): The PostgreSQL password.
        SQLALCHEMY_ASYNC_DATABASE_URI (Optional[PostgresDsn]): The SQLAlchemy async database URI.
        DB_POOL_SIZE (int): Connection pool size of the async engine.
        RUN_ALEMBIC_MIGRATIONS (bool): Whether to run the alembic migrations on startup.
        GITHUB_TOKEN (Optional[str]): Token used for the GitHub GraphQL API.
        GITHUB_GRAPHQL_URL (str): GitHub GraphQL endpoint.
        GITHUB_REQUEST_TIMEOUT (float): Per-request timeout in seconds.
        SYNC_PAGE_SIZE (int): Number of nodes requested per page.
        SYNC_OVERLAP_SECONDS (float): Grace window subtracted from the watermark when filtering.
        SYNC_CONCURRENT_ENTITY_TYPES (bool): Run issues, PRs and discussions concurrently.
        COMMENT_PAGE_SIZE (int): Number of comments requested per page.
        RATE_LIMIT_THRESHOLD (int): Remaining quota at or below which the sync waits for reset.
        RATE_LIMIT_BUFFER_SECONDS (float): Pad added to the reset time before resuming.
        SCHEDULER_ENABLED (bool): Whether the periodic scheduler runs with the API.
        SCHEDULER_CRON (str): Cron expression for scheduled ingestion.
        SCHEDULER_REPOSITORIES (Optional[str]): Repositories to ingest, "owner/name" separated
            by commas or semicolons.
    """

    PROJECT_NAME: str = "ghsync"
    LOCAL_DEVELOPMENT: bool = False

    # Logging configuration
    LOG_LEVEL: str = "INFO"

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "ghsync"
    POSTGRES_USER: str = "ghsync"
    POSTGRES_PASSWORD: str = "ghsync"
    SQLALCHEMY_ASYNC_DATABASE_URI: Optional[PostgresDsn] = None
    DB_POOL_SIZE: int = 10

    RUN_ALEMBIC_MIGRATIONS: bool = False

    # GitHub configuration
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
    GITHUB_REQUEST_TIMEOUT: float = 30.0

    # Sync configuration
    SYNC_PAGE_SIZE: int = 50
    SYNC_OVERLAP_SECONDS: float = 0.0
    SYNC_CONCURRENT_ENTITY_TYPES: bool = False
    COMMENT_PAGE_SIZE: int = 100

    RATE_LIMIT_THRESHOLD: int = 50
    RATE_LIMIT_BUFFER_SECONDS: float = 1.0

    # Scheduler configuration
    SCHEDULER_ENABLED: bool = False
    SCHEDULER_CRON: str = "*/15 * * * *"
    SCHEDULER_REPOSITORIES: Optional[str] = None

    @field_validator("SQLALCHEMY_ASYNC_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> PostgresDsn:
        """Build the SQLAlchemy database URI.

        Args:
        ----
            v (Optional[str]): The value of the SQLALCHEMY_ASYNC_DATABASE_URI setting.
            info (ValidationInfo): The validation context containing all field values.

        Returns:
        -------
            PostgresDsn: The assembled SQLAlchemy async database URI.

        """
        if isinstance(v, str):
            return v

        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=info.data.get("POSTGRES_USER"),
            password=info.data.get("POSTGRES_PASSWORD"),
            host=info.data.get("POSTGRES_HOST", "localhost"),
            port=info.data.get("POSTGRES_PORT"),
            path=f"{info.data.get('POSTGRES_DB') or ''}",
        )

    @property
    def scheduled_repositories(self) -> list[tuple[str, str]]:
        """Parse SCHEDULER_REPOSITORIES into (owner, name) pairs.

        Supports both comma and semicolon separators.

        Raises:
        ------
            ValueError: If an entry is not in "owner/name" form.
        """
        if not self.SCHEDULER_REPOSITORIES:
            return []

        raw = self.SCHEDULER_REPOSITORIES.replace(";", ",")
        repositories = []
        for entry in (part.strip() for part in raw.split(",")):
            if not entry:
                continue
            owner, _, name = entry.partition("/")
            if not owner or not name or "/" in name:
                raise ValueError(f"Invalid repository '{entry}', expected 'owner/name'")
            repositories.append((owner, name))
        return repositories


settings = Settings()
