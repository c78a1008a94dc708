"""
Storage contract shared by the embedded and networked backends.

`StorageBackend` lists the capabilities callers rely on. `SQLAlchemyBackend`
implements them once over an engine; subclasses only decide how the engine is
built and which dialect `INSERT ... ON CONFLICT DO NOTHING` comes from.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Optional, TypeVar

from sqlalchemy import func, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from supportbot.db.errors import (
    NotInitialized,
    StorageReadError,
    StorageUnavailable,
    StorageWriteError,
)
from supportbot.db.models import ChatSession, InappropriateLog, Message, UnknownQuestion
from supportbot.db.session import Base, new_id, session_scope, utcnow
from supportbot.model.logs.log_response import (
    InappropriateLogRecord,
    MessageRecord,
    SessionLog,
    UnknownQuestionRecord,
)

logger = logging.getLogger(__name__)

SENDERS = ("user", "bot")
ALL_MESSAGES_CAP = 100

T = TypeVar("T")


def _check_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    return limit


class StorageBackend(ABC):
    name = "unknown"

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def create_session(self, user_email: Optional[str], session_id: Optional[str] = None) -> str: ...

    @abstractmethod
    def log_message(self, session_id: str, content: str, sender: str, category: Optional[str] = None) -> str: ...

    @abstractmethod
    def end_session(self, session_id: str, feedback: Optional[Mapping[str, Any]] = None) -> None: ...

    @abstractmethod
    def log_unknown_question(self, session_id: str, question: str) -> str: ...

    @abstractmethod
    def log_inappropriate_content(self, session_id: str, content: str, user_ip: Optional[str]) -> str: ...

    @abstractmethod
    def get_session_logs(self, limit: int = 100) -> list[SessionLog]: ...

    @abstractmethod
    def get_unknown_questions(self, reviewed: bool = False, limit: Optional[int] = None) -> list[UnknownQuestionRecord]: ...

    @abstractmethod
    def review_unknown_question(self, question_id: str) -> bool: ...

    @abstractmethod
    def get_all_messages(self) -> list[MessageRecord]: ...

    @abstractmethod
    def get_session_messages(self, session_id: str, limit: int = 20) -> list[MessageRecord]: ...

    @abstractmethod
    def get_inappropriate_logs(self, limit: int = 100) -> list[InappropriateLogRecord]: ...

    def dispose(self) -> None:
        pass


class SQLAlchemyBackend(StorageBackend):
    def __init__(self) -> None:
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @abstractmethod
    def _create_engine(self) -> Engine: ...

    @abstractmethod
    def _insert(self, model):
        """Dialect insert construct supporting `on_conflict_do_nothing`."""

    def _prepare(self) -> None:
        """Hook run before the engine is created."""

    def initialize(self) -> None:
        try:
            self._prepare()
            engine = self._create_engine()
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
        except (SQLAlchemyError, OSError, ImportError, ValueError) as exc:
            logger.error("Error initializing %s database: %s", self.name, exc)
            raise StorageUnavailable(f"{self.name} database unavailable: {exc}") from exc

        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
        logger.info("%s tables initialized", self.name)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()

    def _run(self, action: str, work: Callable[[Session], T], error: type) -> T:
        if self._session_factory is None:
            raise NotInitialized()
        try:
            with session_scope(self._session_factory) as db:
                return work(db)
        except SQLAlchemyError as exc:
            logger.exception("Error %s", action)
            raise error(f"Error {action}: {exc}") from exc

    def _write(self, action: str, work: Callable[[Session], T]) -> T:
        return self._run(action, work, StorageWriteError)

    def _read(self, action: str, work: Callable[[Session], T]) -> T:
        return self._run(action, work, StorageReadError)

    # writes

    def create_session(self, user_email: Optional[str], session_id: Optional[str] = None) -> str:
        sid = session_id or new_id()
        stmt = (
            self._insert(ChatSession)
            .values(id=sid, user_email=user_email, start_time=utcnow())
            .on_conflict_do_nothing(index_elements=["id"])
        )
        self._write("creating session", lambda db: db.execute(stmt))
        return sid

    def log_message(self, session_id: str, content: str, sender: str, category: Optional[str] = None) -> str:
        if sender not in SENDERS:
            raise ValueError(f"sender must be one of {SENDERS}, got {sender!r}")
        message_id = new_id()
        row = Message(
            id=message_id,
            session_id=session_id,
            content=content,
            sender=sender,
            category=category,
            timestamp=utcnow(),
        )
        self._write("logging message", lambda db: db.add(row))
        return message_id

    def end_session(self, session_id: str, feedback: Optional[Mapping[str, Any]] = None) -> None:
        values: dict[str, Any] = {"end_time": utcnow()}
        if feedback is not None:
            values.update(
                feedback_rating=feedback.get("rating"),
                feedback_comments=feedback.get("comments"),
                feedback_helpful=feedback.get("helpful"),
            )
        stmt = update(ChatSession).where(ChatSession.id == session_id).values(**values)
        # No matching row is not an error
        self._write("ending session", lambda db: db.execute(stmt))

    def log_unknown_question(self, session_id: str, question: str) -> str:
        question_id = new_id()
        row = UnknownQuestion(
            id=question_id,
            session_id=session_id,
            question=question,
            timestamp=utcnow(),
            reviewed=False,
        )
        self._write("logging unknown question", lambda db: db.add(row))
        return question_id

    def log_inappropriate_content(self, session_id: str, content: str, user_ip: Optional[str]) -> str:
        log_id = new_id()
        row = InappropriateLog(
            id=log_id,
            session_id=session_id,
            content=content,
            user_ip=user_ip,
            timestamp=utcnow(),
        )
        self._write("logging inappropriate content", lambda db: db.add(row))
        return log_id

    def review_unknown_question(self, question_id: str) -> bool:
        stmt = update(UnknownQuestion).where(UnknownQuestion.id == question_id).values(reviewed=True)
        matched = self._write("reviewing unknown question", lambda db: db.execute(stmt).rowcount)
        return matched > 0

    # reads

    def get_session_logs(self, limit: int = 100) -> list[SessionLog]:
        stmt = (
            select(ChatSession, func.count(Message.id).label("message_count"))
            .outerjoin(Message, Message.session_id == ChatSession.id)
            .group_by(ChatSession.id)
            .order_by(ChatSession.start_time.desc())
            .limit(_check_limit(limit))
        )

        def work(db: Session) -> list[SessionLog]:
            return [
                SessionLog.model_validate(chat_session).model_copy(update={"message_count": count})
                for chat_session, count in db.execute(stmt).all()
            ]

        return self._read("getting session logs", work)

    def get_unknown_questions(self, reviewed: bool = False, limit: Optional[int] = None) -> list[UnknownQuestionRecord]:
        stmt = (
            select(UnknownQuestion)
            .where(UnknownQuestion.reviewed == bool(reviewed))
            .order_by(UnknownQuestion.timestamp.desc())
        )
        if limit is not None:
            stmt = stmt.limit(_check_limit(limit))
        return self._read(
            "getting unknown questions",
            lambda db: [UnknownQuestionRecord.model_validate(row) for row in db.execute(stmt).scalars()],
        )

    def get_all_messages(self) -> list[MessageRecord]:
        stmt = select(Message).order_by(Message.timestamp.desc()).limit(ALL_MESSAGES_CAP)
        return self._read(
            "getting all messages",
            lambda db: [MessageRecord.model_validate(row) for row in db.execute(stmt).scalars()],
        )

    def get_session_messages(self, session_id: str, limit: int = 20) -> list[MessageRecord]:
        stmt = (
            select(Message)
            .where(Message.session_id == session_id)
            .order_by(Message.timestamp.asc())
            .limit(_check_limit(limit))
        )
        return self._read(
            "getting session messages",
            lambda db: [MessageRecord.model_validate(row) for row in db.execute(stmt).scalars()],
        )

    def get_inappropriate_logs(self, limit: int = 100) -> list[InappropriateLogRecord]:
        stmt = select(InappropriateLog).order_by(InappropriateLog.timestamp.desc()).limit(_check_limit(limit))
        return self._read(
            "getting inappropriate logs",
            lambda db: [InappropriateLogRecord.model_validate(row) for row in db.execute(stmt).scalars()],
        )
