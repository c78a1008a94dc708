from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

import supportbot.db.backend as backend_module
from supportbot.client.db.sqlite import SQLiteBackend
from supportbot.db.storage import Storage
from supportbot.main import app


@pytest.fixture(scope="function")
def clock(monkeypatch):
    """Strictly increasing timestamps so ordering never depends on clock resolution."""
    state = {"now": datetime(2024, 6, 1, 12, 0, 0)}

    def tick():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    monkeypatch.setattr(backend_module, "utcnow", tick)
    return state


#scope : function < class < module < package < session
@pytest.fixture(scope="function")
def storage(tmp_path, clock):
    backend = SQLiteBackend(tmp_path / "data" / "chatbot.db")
    backend.initialize()
    yield Storage(backend)
    backend.dispose()


@pytest.fixture(scope="function")
def client(storage, monkeypatch):
    monkeypatch.setattr(app.state, "storage", storage)
    return TestClient(app)
