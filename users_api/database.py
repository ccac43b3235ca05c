import logging
import time

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from users_api.config import Settings
from users_api.models import Base

logger = logging.getLogger(__name__)


def connect_with_retry(url: str, echo: bool = False, retries: int = 10, delay: float = 1.5) -> Engine:
    """Create an engine and make sure the database answers.

    Retrying is harmless for SQLite and lets the service start before
    a PostgreSQL container is ready.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}

    for attempt in range(retries):
        engine = create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)
        try:
            with engine.connect():  # smoke test
                pass
            return engine
        except OperationalError as e:
            engine.dispose()
            if attempt < retries - 1:
                logger.warning(
                    "Database connection attempt %d/%d failed. Retrying in %ss...",
                    attempt + 1, retries, delay,
                )
                time.sleep(delay)
            else:
                raise RuntimeError(
                    f"Could not connect to database at {url} after {retries} retries"
                ) from e
    raise RuntimeError("DB_RETRIES must be at least 1")


class Database:
    """Engine and session factory owned by one running application."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = connect_with_retry(
            settings.database_url,
            echo=settings.sql_echo,
            retries=settings.db_retries,
            delay=settings.db_retry_delay,
        )
        return cls(engine)

    def migrate(self) -> None:
        """Create any missing tables and indexes."""
        Base.metadata.create_all(self.engine)
        logger.info("Database schema is up to date")

    def dispose(self) -> None:
        self.engine.dispose()
