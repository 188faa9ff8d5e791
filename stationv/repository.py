"""In-memory roster of users and channels with write-through persistence."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from stationv.constants import CHANNELS_KEY, USERS_KEY
from stationv.merge import merge_channels, merge_users
from stationv.models import Channel, UserDraft, VirtualUser, World
from stationv.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

_USERS_ADAPTER = TypeAdapter(list[VirtualUser])
_CHANNELS_ADAPTER = TypeAdapter(list[Channel])


def _load(store: KeyValueStore, key: str, adapter: TypeAdapter) -> list:
    """Read one collection; missing or corrupt data yields an empty list."""
    try:
        raw = store.get(key)
        if raw is None:
            return []
        return adapter.validate_python(json.loads(raw))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Ignoring corrupt store key %s: %s", key, exc)
        return []


def _upsert(records: list[R], record: R) -> list[R]:
    """Replace the record with the same id in place, or append it."""
    out = list(records)
    for index, current in enumerate(out):
        if current.id == record.id:
            out[index] = record
            return out
    out.append(record)
    return out


class WorldRepository:
    """Owns the ordered user and channel collections.

    Every mutation builds the new collections first and then swaps them in,
    so callers never observe a half-applied change. State is written back to
    the store after each mutation.
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self._users: list[VirtualUser] = _load(self.store, USERS_KEY, _USERS_ADAPTER)
        self._channels: list[Channel] = _load(self.store, CHANNELS_KEY, _CHANNELS_ADAPTER)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def users(self) -> list[VirtualUser]:
        return list(self._users)

    @property
    def channels(self) -> list[Channel]:
        return list(self._channels)

    def world(self) -> World:
        return World(users=self.users, channels=self.channels)

    def get_user(self, user_id: str) -> VirtualUser | None:
        return next((u for u in self._users if u.id == user_id), None)

    def get_channel(self, channel_id: str) -> Channel | None:
        return next((c for c in self._channels if c.id == channel_id), None)

    def find_user_by_nickname(self, nickname: str) -> VirtualUser | None:
        folded = nickname.casefold()
        return next((u for u in self._users if u.nickname.casefold() == folded), None)

    def find_channel_by_name(self, name: str) -> Channel | None:
        return next((c for c in self._channels if c.name == name), None)

    def nicknames(self) -> list[str]:
        return [u.nickname for u in self._users]

    def members(self, channel_id: str) -> list[VirtualUser]:
        """Resolve a channel's user ids, skipping ids with no matching user."""
        channel = self.get_channel(channel_id)
        if channel is None:
            return []
        by_id = {u.id: u for u in self._users}
        return [by_id[uid] for uid in dict.fromkeys(channel.users) if uid in by_id]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upsert_user(self, user: VirtualUser) -> VirtualUser:
        self._commit(users=_upsert(self._users, user))
        return user

    def add_users(self, drafts: Iterable[UserDraft]) -> list[VirtualUser]:
        """Assign fresh ids to *drafts* and append them."""
        created = [draft.with_id() for draft in drafts]
        if created:
            self._commit(users=[*self._users, *created])
        return created

    def remove_user(self, user_id: str) -> bool:
        """Delete a user and drop its id from every channel.

        Returns ``False`` when no such user exists; channels are still
        cleaned of the id in that case.
        """
        users = [u for u in self._users if u.id != user_id]
        channels = [c.without_user(user_id) for c in self._channels]
        found = len(users) != len(self._users)
        if found or channels != self._channels:
            self._commit(users=users, channels=channels)
        return found

    def upsert_channel(self, channel: Channel) -> Channel:
        self._commit(channels=_upsert(self._channels, channel))
        return channel

    def remove_channel(self, channel_id: str) -> bool:
        channels = [c for c in self._channels if c.id != channel_id]
        if len(channels) == len(self._channels):
            return False
        self._commit(channels=channels)
        return True

    def clear_channels(self) -> int:
        count = len(self._channels)
        self._commit(channels=[])
        return count

    def import_users(self, users: Iterable[VirtualUser]) -> None:
        self._commit(users=merge_users(self._users, users))

    def import_world(self, world: World) -> None:
        self._commit(
            users=merge_users(self._users, world.users),
            channels=merge_channels(self._channels, world.channels),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _commit(
        self,
        *,
        users: list[VirtualUser] | None = None,
        channels: list[Channel] | None = None,
    ) -> None:
        if users is not None:
            self._users = users
        if channels is not None:
            self._channels = channels
        if users is not None:
            self._save(USERS_KEY, _USERS_ADAPTER, self._users)
        if channels is not None:
            self._save(CHANNELS_KEY, _CHANNELS_ADAPTER, self._channels)

    def _save(self, key: str, adapter: TypeAdapter, records: list) -> None:
        payload = adapter.dump_json(records, by_alias=True).decode("utf-8")
        try:
            self.store.set(key, payload)
        except OSError as exc:
            logger.error("Error saving %s to store: %s", key, exc)
