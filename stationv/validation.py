"""Form-level validation rules for users and channels.

These run when a record is created or edited by hand. Imports bypass them
and reconcile through the merge engine instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from stationv.constants import NICKNAME_MAX_LENGTH, NICKNAME_MIN_LENGTH

_WHITESPACE_RE = re.compile(r"\s")


def validate_nickname(
    nickname: str,
    existing: Iterable[str],
    current: str | None = None,
) -> str | None:
    """Return an error message for *nickname*, or ``None`` when it is acceptable.

    *current* is the nickname of the user being edited; keeping it unchanged
    is not a collision.
    """
    if not nickname:
        return "Nickname is required."
    if not NICKNAME_MIN_LENGTH <= len(nickname) <= NICKNAME_MAX_LENGTH:
        return f"Nickname must be {NICKNAME_MIN_LENGTH}-{NICKNAME_MAX_LENGTH} characters."
    if _WHITESPACE_RE.search(nickname):
        return "Nickname cannot contain spaces."
    folded = nickname.casefold()
    if current is not None and current.casefold() == folded:
        return None
    if any(nick.casefold() == folded for nick in existing):
        return "Nickname is already taken."
    return None


def validate_channel_name(name: str) -> str | None:
    """Return an error message for a channel *name*, or ``None``."""
    if not name.strip():
        return "Channel name is required."
    if not name.startswith("#"):
        return "Channel name must start with #."
    return None
