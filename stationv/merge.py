"""Natural-key merge used when importing users and channels."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from stationv.models import Channel, VirtualUser

T = TypeVar("T")

KeyFunc = Callable[[T], Hashable]


def user_key(user: VirtualUser) -> str:
    """Users reconcile on exact (case-sensitive) nickname."""
    return user.nickname


def channel_key(channel: Channel) -> str:
    """Channels reconcile on name."""
    return channel.name


def merge_records(
    existing: Iterable[T],
    incoming: Iterable[T],
    *,
    key: KeyFunc[T],
) -> list[T]:
    """Last-write-wins merge of *incoming* over *existing*, keyed by *key*.

    Incoming records replace whole records, never individual fields. Records
    whose key already exists keep their slot; new keys are appended in input
    order, and a later duplicate in *incoming* beats an earlier one.
    """
    merged: dict[Hashable, T] = {}
    for record in existing:
        merged[key(record)] = record
    for record in incoming:
        merged[key(record)] = record
    return list(merged.values())


def merge_users(existing: Iterable[VirtualUser], incoming: Iterable[VirtualUser]) -> list[VirtualUser]:
    return merge_records(existing, incoming, key=user_key)


def merge_channels(existing: Iterable[Channel], incoming: Iterable[Channel]) -> list[Channel]:
    return merge_records(existing, incoming, key=channel_key)
