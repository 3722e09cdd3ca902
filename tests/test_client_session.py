"""
Tests for the client-side session stores.
"""

import json

from authflow.client.session_store import TOKEN_KEY, USER_KEY, ClientSessionStore
from authflow.client.storage import JsonFileStore, MemoryStore

ALICE = {"id": "8d2c0c4e-0000-4000-8000-000000000001", "name": "Alice", "email": "alice@example.com"}


class TestMemoryStore:
    def test_set_get_remove(self):
        store = MemoryStore()
        store.set("a", "1")

        assert store.get("a") == "1"
        assert "a" in store

        store.remove("a")
        store.remove("a")
        assert store.get("a") is None


class TestJsonFileStore:
    def test_values_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "session.json"
        JsonFileStore(path).set("token", "1|abc")

        assert JsonFileStore(path).get("token") == "1|abc"
        assert json.loads(path.read_text()) == {"token": "1|abc"}

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "nope" / "session.json").get("token") is None

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        store = JsonFileStore(path)

        assert store.get("token") is None

        store.set("token", "1|abc")
        assert store.get("token") == "1|abc"

    def test_clear(self, tmp_path):
        store = JsonFileStore(tmp_path / "session.json")
        store.set("token", "1|abc")
        store.set("other", "x")

        store.clear()

        assert store.get("token") is None
        assert store.get("other") is None


class TestClientSessionStore:
    def test_save_and_restore(self):
        sessions = ClientSessionStore(MemoryStore())
        sessions.save(ALICE, "1|abc")

        session = sessions.restore()

        assert session.user == ALICE
        assert session.token == "1|abc"

    def test_restore_from_disk(self, tmp_path):
        path = tmp_path / "session.json"
        ClientSessionStore(JsonFileStore(path)).save(ALICE, "1|abc")

        session = ClientSessionStore(JsonFileStore(path)).restore()

        assert session.user["email"] == "alice@example.com"

    def test_missing_token_means_logged_out(self):
        store = MemoryStore({USER_KEY: json.dumps(ALICE)})

        assert ClientSessionStore(store).restore() is None

    def test_missing_user_means_logged_out(self):
        store = MemoryStore({TOKEN_KEY: "1|abc"})

        assert ClientSessionStore(store).restore() is None

    def test_corrupt_user_means_logged_out(self):
        store = MemoryStore({TOKEN_KEY: "1|abc", USER_KEY: "{oops"})

        assert ClientSessionStore(store).restore() is None

    def test_replace_token_keeps_user(self):
        sessions = ClientSessionStore(MemoryStore())
        sessions.save(ALICE, "1|abc")

        sessions.replace_token("2|def")

        assert sessions.restore().token == "2|def"
        assert sessions.get_user() == ALICE

    def test_clear_removes_both_keys(self):
        store = MemoryStore({"unrelated": "keep"})
        sessions = ClientSessionStore(store)
        sessions.save(ALICE, "1|abc")

        sessions.clear()

        assert TOKEN_KEY not in store
        assert USER_KEY not in store
        assert store.get("unrelated") == "keep"
        assert sessions.restore() is None
