from sqlalchemy import create_engine
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.engine import Engine

from supportbot.db.backend import SQLAlchemyBackend


def normalize_url(url: str) -> str:
    url = url.strip()
    # Hosted providers hand out postgres:// which SQLAlchemy rejects
    if url.startswith("postgres://"):
        return "postgresql+psycopg2://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg2://" + url[len("postgresql://"):]
    return url


class PostgresBackend(SQLAlchemyBackend):
    name = "postgresql"

    def __init__(
        self,
        url: str,
        pool_size: int = 20,
        pool_recycle: int = 30,
        pool_timeout: int = 2,
        ssl: bool = False,
    ):
        super().__init__()
        self.url = normalize_url(url)
        self.pool_size = pool_size
        self.pool_recycle = pool_recycle
        self.pool_timeout = pool_timeout
        self.ssl = ssl

    def _create_engine(self) -> Engine:
        connect_args = {"connect_timeout": self.pool_timeout}
        if self.ssl:
            connect_args["sslmode"] = "require"
        return create_engine(
            self.url,
            future=True,
            pool_size=self.pool_size,
            max_overflow=0,
            pool_recycle=self.pool_recycle,
            pool_timeout=self.pool_timeout,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    def _insert(self, model):
        return pg_insert(model)
