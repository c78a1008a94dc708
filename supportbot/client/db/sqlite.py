from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from supportbot.db.backend import SQLAlchemyBackend


class SQLiteBackend(SQLAlchemyBackend):
    """Embedded backend: one database file, writes serialized by SQLite itself."""

    name = "sqlite"

    def __init__(self, path: Path | str):
        super().__init__()
        self.path = Path(path)

    def _prepare(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _create_engine(self) -> Engine:
        return create_engine(
            f"sqlite:///{self.path}",
            future=True,
            # FastAPI runs sync routes on a worker thread pool
            connect_args={"check_same_thread": False},
        )

    def _insert(self, model):
        return sqlite_insert(model)
