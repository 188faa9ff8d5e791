"""stationv: roster editor for the Station V IRC simulator."""

from stationv.errors import (
    GenerationError,
    ImportValidationError,
    StationError,
    UnsupportedFormatError,
)
from stationv.models import Channel, LanguageSkill, UserDraft, VirtualUser, World, WritingStyle
from stationv.repository import WorldRepository

__all__ = [
    "Channel",
    "GenerationError",
    "ImportValidationError",
    "LanguageSkill",
    "StationError",
    "UnsupportedFormatError",
    "UserDraft",
    "VirtualUser",
    "World",
    "WorldRepository",
    "WritingStyle",
]
