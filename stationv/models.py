"""Core data models for stationv."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from stationv.constants import EmojiUsage, Formality, Humor, Punctuation, Verbosity


class Fluency(str, Enum):
    """Command of a language, strongest first."""

    NATIVE = "Native"
    FLUENT = "Fluent"
    ADVANCED = "Advanced"
    INTERMEDIATE = "Intermediate"
    BEGINNER = "Beginner"


FLUENCY_LEVELS: list[Fluency] = list(Fluency)


def new_id() -> str:
    """Return a fresh opaque record id."""
    return uuid.uuid4().hex


# Wire format is camelCase; attributes are snake_case. Both are accepted on input.


class LanguageSkill(BaseModel, frozen=True, populate_by_name=True):
    """One language a user speaks."""

    language: str
    fluency: Fluency
    accent: str = ""


class WritingStyle(BaseModel, frozen=True, populate_by_name=True):
    """Five-axis stylistic profile."""

    formality: Formality = "Neutral"
    verbosity: Verbosity = "Neutral"
    humor: Humor = "None"
    emoji_usage: EmojiUsage = Field(default="Medium", alias="emojiUsage")
    punctuation: Punctuation = "Standard"


DEFAULT_LANGUAGE_SKILL = LanguageSkill(language="English", fluency=Fluency.NATIVE)
DEFAULT_WRITING_STYLE = WritingStyle()


class UserDraft(BaseModel, frozen=True, populate_by_name=True):
    """A user that has not been committed yet, so it carries no id."""

    nickname: str = Field(min_length=1)
    personality: str = ""
    language_skills: list[LanguageSkill] = Field(default_factory=list, alias="languageSkills")
    writing_style: WritingStyle = Field(default=DEFAULT_WRITING_STYLE, alias="writingStyle")

    def with_id(self, user_id: str | None = None) -> VirtualUser:
        """Promote the draft to a stored user."""
        return VirtualUser(id=user_id or new_id(), **self.model_dump(exclude={"id"}))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class VirtualUser(UserDraft, frozen=True, populate_by_name=True):
    """A simulated IRC user."""

    id: str = Field(min_length=1)


class ExportedUser(VirtualUser, frozen=True, populate_by_name=True):
    """Write-only projection for the simulator: a user plus derived fields.

    Never used on import, so the derived fields stay mandatory here.
    """

    system_prompt: str
    enabled: bool = True
    presence_interval: int


class Channel(BaseModel, frozen=True, populate_by_name=True):
    """An IRC channel and the ids of the users sitting in it."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    topic: str = ""
    users: list[str] = Field(default_factory=list)

    def without_user(self, user_id: str) -> Channel:
        if user_id not in self.users:
            return self
        return self.model_copy(update={"users": [uid for uid in self.users if uid != user_id]})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class World(BaseModel, frozen=True):
    """The combined import/export unit."""

    users: list[VirtualUser] = Field(default_factory=list)
    channels: list[Channel] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "channels": [c.to_dict() for c in self.channels],
        }
