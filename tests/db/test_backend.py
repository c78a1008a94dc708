import pytest
from sqlalchemy import select, text

from supportbot.client.db.sqlite import SQLiteBackend
from supportbot.db.errors import NotInitialized, StorageReadError, StorageWriteError
from supportbot.db.models import ChatSession, InappropriateLog


def _session_rows(storage, session_id):
    with storage.backend.engine.connect() as conn:
        return conn.execute(select(ChatSession).where(ChatSession.id == session_id)).all()


def test_create_session_is_idempotent(storage):
    first = storage.create_session("a@x.com", "s1")
    second = storage.create_session("b@x.com", "s1")

    assert first == second == "s1"
    rows = _session_rows(storage, "s1")
    assert len(rows) == 1
    # The first creator wins; the repeat call changes nothing
    assert rows[0].user_email == "a@x.com"


def test_create_session_generates_id(storage):
    sid = storage.create_session("a@x.com")

    assert sid
    assert [log.id for log in storage.get_session_logs(10)] == [sid]


def test_session_messages_read_in_conversation_order(storage):
    storage.create_session("a@x.com", "s1")
    storage.log_message("s1", "first", "user")
    storage.log_message("s1", "second", "bot", "general")
    storage.log_message("s1", "third", "user")
    storage.log_message("other", "elsewhere", "user")

    messages = storage.get_session_messages("s1", 20)

    assert [m.content for m in messages] == ["first", "second", "third"]
    assert messages[1].category == "general"
    assert storage.get_session_messages("s1", 2)[-1].content == "second"


def test_session_logs_newest_first_with_counts(storage):
    storage.create_session("a@x.com", "older")
    storage.create_session("b@x.com", "newer")
    storage.create_session("c@x.com", "empty")
    storage.log_message("older", "hi", "user")
    storage.log_message("older", "hello", "bot", "general")
    storage.log_message("older", "bye", "user")
    storage.log_message("newer", "hi", "user")

    logs = storage.get_session_logs(10)

    assert [log.id for log in logs] == ["empty", "newer", "older"]
    counts = {log.id: log.message_count for log in logs}
    assert counts == {"empty": 0, "newer": 1, "older": 3}


def test_session_logs_respect_limit(storage):
    for i in range(5):
        storage.create_session("a@x.com", f"s{i}")

    logs = storage.get_session_logs(3)

    assert [log.id for log in logs] == ["s4", "s3", "s2"]


def test_all_messages_capped_at_100(storage):
    storage.create_session("a@x.com", "s1")
    for i in range(105):
        storage.log_message("s1", f"message {i}", "user")

    messages = storage.get_all_messages()

    assert len(messages) == 100
    assert messages[0].content == "message 104"
    assert messages[-1].content == "message 5"


def test_unknown_questions_partition_on_reviewed(storage):
    first = storage.log_unknown_question("s1", "do you sell cakes?")
    second = storage.log_unknown_question("s1", "is there parking?")
    third = storage.log_unknown_question("s2", "can I bring my dog?")

    assert storage.review_unknown_question(second) is True
    assert storage.review_unknown_question("missing") is False

    pending = storage.get_unknown_questions(False)
    reviewed = storage.get_unknown_questions(True)

    assert [q.id for q in pending] == [third, first]
    assert [q.id for q in reviewed] == [second]
    assert all(not q.reviewed for q in pending)
    assert all(q.reviewed for q in reviewed)

    assert [q.id for q in storage.get_unknown_questions(False, 1)] == [third]


def test_end_session_with_feedback(storage):
    storage.create_session("a@x.com", "s1")
    storage.end_session("s1", {"rating": 4, "comments": "tasty", "helpful": True})

    log = storage.get_session_logs(1)[0]
    assert log.end_time is not None
    assert log.end_time > log.start_time
    assert (log.feedback_rating, log.feedback_comments, log.feedback_helpful) == (4, "tasty", True)


def test_end_session_without_feedback_only_sets_end_time(storage):
    storage.create_session("a@x.com", "s1")
    storage.end_session("s1")

    log = storage.get_session_logs(1)[0]
    assert log.end_time is not None
    assert log.feedback_rating is None
    assert log.feedback_helpful is None


def test_end_session_on_missing_id_is_noop(storage):
    storage.end_session("nope", {"rating": 1})

    assert storage.get_session_logs(10) == []


def test_orphan_rows_are_accepted(storage):
    message_id = storage.log_message("never-created", "hi", "user")
    storage.log_inappropriate_content("never-created", "bad words", "10.0.0.1")

    assert [m.id for m in storage.get_session_messages("never-created", 5)] == [message_id]
    with storage.backend.engine.connect() as conn:
        row = conn.execute(select(InappropriateLog)).one()
    assert (row.session_id, row.content, row.user_ip) == ("never-created", "bad words", "10.0.0.1")


def test_inappropriate_logs_newest_first(storage):
    first = storage.log_inappropriate_content("s1", "hate speech", "10.0.0.1")
    second = storage.log_inappropriate_content("s2", "weapon talk", None)

    logs = storage.get_inappropriate_logs(10)

    assert [(log.id, log.user_ip) for log in logs] == [(second, None), (first, "10.0.0.1")]
    assert [log.id for log in storage.get_inappropriate_logs(1)] == [second]


def test_log_message_rejects_unknown_sender(storage):
    with pytest.raises(ValueError):
        storage.log_message("s1", "hi", "assistant")


@pytest.mark.parametrize("limit", [0, -1, "10"])
def test_reads_reject_bad_limit(storage, limit):
    with pytest.raises(ValueError):
        storage.get_session_logs(limit)
    with pytest.raises(ValueError):
        storage.get_session_messages("s1", limit)
    with pytest.raises(ValueError):
        storage.get_unknown_questions(False, limit)
    with pytest.raises(ValueError):
        storage.get_inappropriate_logs(limit)


def test_write_failure_raises_write_error(storage):
    with storage.backend.engine.begin() as conn:
        conn.execute(text("DROP TABLE messages"))

    with pytest.raises(StorageWriteError):
        storage.log_message("s1", "hi", "user")


def test_read_failure_raises_read_error(storage):
    with storage.backend.engine.begin() as conn:
        conn.execute(text("DROP TABLE unknown_questions"))

    with pytest.raises(StorageReadError):
        storage.get_unknown_questions(False)


def test_initialize_is_repeatable(tmp_path):
    path = tmp_path / "chatbot.db"
    backend = SQLiteBackend(path)
    backend.initialize()
    backend.create_session("a@x.com", "s1")
    backend.dispose()

    again = SQLiteBackend(path)
    again.initialize()

    assert [log.id for log in again.get_session_logs(5)] == ["s1"]
    again.dispose()


def test_backend_used_before_initialize(tmp_path):
    backend = SQLiteBackend(tmp_path / "chatbot.db")

    with pytest.raises(NotInitialized):
        backend.create_session("a@x.com", "s1")


def test_end_to_end_session(storage):
    storage.create_session("a@x.com", "s1")
    storage.log_message("s1", "hi", "user")
    storage.log_message("s1", "hello!", "bot", "general")
    storage.end_session("s1", {"rating": 5, "helpful": True})

    log = next(log for log in storage.get_session_logs(10) if log.id == "s1")

    assert log.user_email == "a@x.com"
    assert log.message_count == 2
    assert log.end_time is not None
    assert log.feedback_rating == 5
    assert log.feedback_helpful is True
