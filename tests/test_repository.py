"""Tests for the world repository."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from stationv.constants import CHANNELS_KEY, USERS_KEY
from stationv.models import Channel, UserDraft, VirtualUser, World
from stationv.repository import WorldRepository
from stationv.storage import JsonDirStore, MemoryStore


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def repo(store: MemoryStore) -> WorldRepository:
    return WorldRepository(store)


class TestUpsert:
    def test_append_then_replace(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo", personality="v1"))
        repo.upsert_user(VirtualUser(id="1", nickname="neo", personality="v2"))
        assert len(repo.users) == 1
        assert repo.get_user("1").personality == "v2"

    def test_replace_preserves_position(self, repo: WorldRepository) -> None:
        for uid, nick in (("1", "a"), ("2", "b"), ("3", "c")):
            repo.upsert_user(VirtualUser(id=uid, nickname=nick))
        repo.upsert_user(VirtualUser(id="2", nickname="bee"))
        assert [u.nickname for u in repo.users] == ["a", "bee", "c"]

    def test_channel_upsert(self, repo: WorldRepository) -> None:
        repo.upsert_channel(Channel(id="c1", name="#a"))
        repo.upsert_channel(Channel(id="c1", name="#b"))
        assert [c.name for c in repo.channels] == ["#b"]

    def test_add_users_assigns_ids(self, repo: WorldRepository) -> None:
        created = repo.add_users([UserDraft(nickname="neo"), UserDraft(nickname="trinity")])
        assert len({u.id for u in created}) == 2
        assert repo.nicknames() == ["neo", "trinity"]


class TestRemoveUser:
    def test_cascade_scenario(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_channel(Channel(id="c1", name="#matrix", users=["1"]))

        assert repo.remove_user("1") is True

        assert repo.get_user("1") is None
        assert repo.channels == [Channel(id="c1", name="#matrix", users=[])]

    def test_removed_from_all_channels(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_user(VirtualUser(id="2", nickname="trinity"))
        repo.upsert_channel(Channel(id="c1", name="#a", users=["1", "2"]))
        repo.upsert_channel(Channel(id="c2", name="#b", users=["2"]))
        repo.upsert_channel(Channel(id="c3", name="#c", users=["1"]))

        repo.remove_user("1")

        assert [c.users for c in repo.channels] == [["2"], ["2"], []]
        assert repo.nicknames() == ["trinity"]

    def test_absent_user_is_noop(self, repo: WorldRepository, store: MemoryStore) -> None:
        repo.upsert_channel(Channel(id="c1", name="#a", users=["2"]))
        before = dict(store.data)
        assert repo.remove_user("404") is False
        assert repo.channels[0].users == ["2"]
        assert store.data == before

    def test_both_keys_persisted(self, repo: WorldRepository, store: MemoryStore) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_channel(Channel(id="c1", name="#matrix", users=["1"]))
        repo.remove_user("1")
        assert json.loads(store.data[USERS_KEY]) == []
        assert json.loads(store.data[CHANNELS_KEY])[0]["users"] == []


class TestChannels:
    def test_remove_channel_keeps_users(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_channel(Channel(id="c1", name="#matrix", users=["1"]))
        assert repo.remove_channel("c1") is True
        assert repo.channels == []
        assert repo.get_user("1") is not None

    def test_remove_missing_channel(self, repo: WorldRepository) -> None:
        assert repo.remove_channel("nope") is False

    def test_clear_channels(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_channel(Channel(id="c1", name="#a"))
        repo.upsert_channel(Channel(id="c2", name="#b"))
        assert repo.clear_channels() == 2
        assert repo.channels == []
        assert len(repo.users) == 1

    def test_members_skip_dangling_ids(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        repo.upsert_channel(Channel(id="c1", name="#a", users=["1", "ghost", "1"]))
        assert [u.nickname for u in repo.members("c1")] == ["neo"]


class TestImport:
    def test_import_users_merges_by_nickname(self, repo: WorldRepository) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo", personality="old"))
        repo.import_users([
            VirtualUser(id="7", nickname="neo", personality="new"),
            VirtualUser(id="8", nickname="trinity"),
        ])
        assert [(u.id, u.nickname) for u in repo.users] == [("7", "neo"), ("8", "trinity")]

    def test_import_world(self, repo: WorldRepository) -> None:
        repo.upsert_channel(Channel(id="c1", name="#matrix", topic="old"))
        repo.import_world(World(
            users=[VirtualUser(id="1", nickname="neo")],
            channels=[Channel(id="c9", name="#matrix", topic="new", users=["1"])],
        ))
        assert repo.channels == [Channel(id="c9", name="#matrix", topic="new", users=["1"])]
        assert repo.nicknames() == ["neo"]


class TestPersistence:
    def test_round_trip_through_store(self, store: MemoryStore) -> None:
        repo = WorldRepository(store)
        repo.upsert_user(VirtualUser.model_validate({
            "id": "1",
            "nickname": "neo",
            "languageSkills": [{"language": "English", "fluency": "Native", "accent": "Zion"}],
            "writingStyle": {"emojiUsage": "None"},
        }))
        repo.upsert_channel(Channel(id="c1", name="#matrix", users=["1"]))

        reloaded = WorldRepository(store)
        assert reloaded.users == repo.users
        assert reloaded.channels == repo.channels

    def test_stored_as_camel_case(self, repo: WorldRepository, store: MemoryStore) -> None:
        repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        assert "languageSkills" in json.loads(store.data[USERS_KEY])[0]

    def test_missing_keys_load_empty(self) -> None:
        repo = WorldRepository(MemoryStore())
        assert repo.users == []
        assert repo.channels == []

    def test_corrupt_key_loads_empty(self, caplog: pytest.LogCaptureFixture) -> None:
        store = MemoryStore({
            USERS_KEY: "{not json",
            CHANNELS_KEY: json.dumps([{"id": "c1", "name": "#ok"}]),
        })
        with caplog.at_level(logging.WARNING, logger="stationv.repository"):
            repo = WorldRepository(store)
        assert repo.users == []
        assert [c.name for c in repo.channels] == ["#ok"]
        assert "corrupt" in caplog.text

    def test_undecodable_file_loads_empty(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / f"{USERS_KEY}.json").write_bytes(b"\xff\xfe[garbage")
        (tmp_path / f"{CHANNELS_KEY}.json").write_text(
            json.dumps([{"id": "c1", "name": "#ok"}]), encoding="utf-8"
        )
        with caplog.at_level(logging.WARNING, logger="stationv.repository"):
            repo = WorldRepository(JsonDirStore(tmp_path))
        assert repo.users == []
        assert [c.name for c in repo.channels] == ["#ok"]
        assert "corrupt" in caplog.text

    def test_invalid_records_load_empty(self) -> None:
        store = MemoryStore({USERS_KEY: json.dumps([{"nickname": "no-id"}])})
        assert WorldRepository(store).users == []

    def test_failed_write_keeps_memory_state(self, caplog: pytest.LogCaptureFixture) -> None:
        class BrokenStore(MemoryStore):
            def set(self, key: str, value: str) -> None:
                raise OSError("disk full")

        repo = WorldRepository(BrokenStore())
        with caplog.at_level(logging.ERROR, logger="stationv.repository"):
            repo.upsert_user(VirtualUser(id="1", nickname="neo"))
        assert repo.nicknames() == ["neo"]
        assert "disk full" in caplog.text
