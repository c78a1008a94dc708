from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from fastapi import Request

from supportbot.client.db.postgres import PostgresBackend
from supportbot.client.db.sqlite import SQLiteBackend
from supportbot.db.backend import StorageBackend
from supportbot.db.errors import NotInitialized, StorageReadError, StorageUnavailable, StorageWriteError
from supportbot.model.logs.log_response import (
    InappropriateLogRecord,
    MessageRecord,
    SessionLog,
    UnknownQuestionRecord,
)

logger = logging.getLogger(__name__)


class Storage:
    """
    Handle to whichever backend won selection.

    Built empty and filled by `initialize`, or built around an already
    initialized backend. Every capability is forwarded unchanged.
    """

    def __init__(self, backend: Optional[StorageBackend] = None):
        self._backend = backend

    @property
    def backend(self) -> StorageBackend:
        if self._backend is None:
            raise NotInitialized()
        return self._backend

    @property
    def backend_type(self) -> str:
        return self._backend.name if self._backend is not None else "unknown"

    def initialize(self, database_url: Optional[str], sqlite_path: Path | str, **pool_options: Any) -> StorageBackend:
        """
        Try the networked backend when a URL is configured, then the embedded
        file. Raises StorageUnavailable only if both fail.
        """
        logger.info("Initializing database (DATABASE_URL present: %s)", bool(database_url and database_url.strip()))

        if database_url and database_url.strip():
            try:
                backend: StorageBackend = PostgresBackend(database_url, **pool_options)
                backend.initialize()
            except Exception:
                # Any networked failure falls through to the embedded file
                logger.exception("PostgreSQL connection failed, falling back to SQLite")
            else:
                logger.info("Using PostgreSQL database")
                self._backend = backend
                return backend
        else:
            logger.info("No DATABASE_URL configured, using SQLite")

        backend = SQLiteBackend(sqlite_path)
        try:
            backend.initialize()
        except StorageUnavailable:
            logger.exception("Both PostgreSQL and SQLite failed")
            raise
        logger.info("Using SQLite database at %s", sqlite_path)
        self._backend = backend
        return backend

    def dispose(self) -> None:
        if self._backend is not None:
            self._backend.dispose()

    def create_session(self, user_email: Optional[str], session_id: Optional[str] = None) -> str:
        return self.backend.create_session(user_email, session_id)

    def log_message(self, session_id: str, content: str, sender: str, category: Optional[str] = None) -> str:
        return self.backend.log_message(session_id, content, sender, category)

    def end_session(self, session_id: str, feedback: Optional[Mapping[str, Any]] = None) -> None:
        return self.backend.end_session(session_id, feedback)

    def log_unknown_question(self, session_id: str, question: str) -> str:
        return self.backend.log_unknown_question(session_id, question)

    def log_inappropriate_content(self, session_id: str, content: str, user_ip: Optional[str]) -> str:
        return self.backend.log_inappropriate_content(session_id, content, user_ip)

    def get_session_logs(self, limit: int = 100) -> list[SessionLog]:
        return self.backend.get_session_logs(limit)

    def get_unknown_questions(self, reviewed: bool = False, limit: Optional[int] = None) -> list[UnknownQuestionRecord]:
        return self.backend.get_unknown_questions(reviewed, limit)

    def review_unknown_question(self, question_id: str) -> bool:
        return self.backend.review_unknown_question(question_id)

    def get_all_messages(self) -> list[MessageRecord]:
        return self.backend.get_all_messages()

    def get_session_messages(self, session_id: str, limit: int = 20) -> list[MessageRecord]:
        return self.backend.get_session_messages(session_id, limit)

    def get_inappropriate_logs(self, limit: int = 100) -> list[InappropriateLogRecord]:
        return self.backend.get_inappropriate_logs(limit)


class RetryingStorage:
    """
    Opt-in wrapper that retries transient write/read failures with
    exponential backoff. Anything else passes straight through.
    """

    RETRYABLE = (StorageWriteError, StorageReadError)

    def __init__(self, storage: Storage, attempts: int = 3, backoff: float = 0.1):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._storage = storage
        self.attempts = attempts
        self.backoff = backoff

    def __getattr__(self, name: str):
        target = getattr(self._storage, name)
        if not callable(target) or name in ("initialize", "dispose"):
            return target

        def call(*args, **kwargs):
            for attempt in range(1, self.attempts + 1):
                try:
                    return target(*args, **kwargs)
                except self.RETRYABLE:
                    if attempt == self.attempts:
                        raise
                    delay = self.backoff * (2 ** (attempt - 1))
                    logger.warning("%s failed (attempt %s/%s), retrying in %.2fs", name, attempt, self.attempts, delay)
                    time.sleep(delay)

        return call


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
