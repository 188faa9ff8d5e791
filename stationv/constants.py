"""Fixed vocabularies, defaults and well-known names."""

from __future__ import annotations

from typing import Literal

Formality = Literal["Very Informal", "Informal", "Neutral", "Formal", "Very Formal"]
Verbosity = Literal["Very Terse", "Terse", "Neutral", "Verbose", "Very Verbose"]
Humor = Literal["None", "Dry", "Sarcastic", "Witty", "Slapstick"]
EmojiUsage = Literal["None", "Low", "Medium", "High", "Excessive"]
Punctuation = Literal["Minimal", "Standard", "Creative", "Excessive"]

FORMALITY_LEVELS: list[str] = ["Very Informal", "Informal", "Neutral", "Formal", "Very Formal"]
VERBOSITY_LEVELS: list[str] = ["Very Terse", "Terse", "Neutral", "Verbose", "Very Verbose"]
HUMOR_LEVELS: list[str] = ["None", "Dry", "Sarcastic", "Witty", "Slapstick"]
EMOJI_LEVELS: list[str] = ["None", "Low", "Medium", "High", "Excessive"]
PUNCTUATION_LEVELS: list[str] = ["Minimal", "Standard", "Creative", "Excessive"]

LANGUAGES: list[str] = [
    "Arabic",
    "English",
    "Finnish",
    "French",
    "German",
    "Hindi",
    "Japanese",
    "Mandarin",
    "Portuguese",
    "Russian",
    "Spanish",
]

# Nickname building blocks for the random strategy.
NICK_ADJECTIVES: list[str] = ["Cool", "Silly", "Clever", "Lazy", "Happy", "Angry"]
NICK_NOUNS: list[str] = ["Cat", "Dog", "Coder", "Ghost", "Ninja", "Rider"]

NICKNAME_MIN_LENGTH = 3
NICKNAME_MAX_LENGTH = 20

PRESENCE_INTERVAL_MIN = 120
PRESENCE_INTERVAL_MAX = 600

# --- Persistence keys ---

USERS_KEY = "station_v_users"
CHANNELS_KEY = "station_v_channels"

# --- Export filenames ---

WORLD_FILENAME = "station_v_world.json"
USERS_JSON_FILENAME = "station_v_users.json"
ENRICHED_USERS_FILENAME = "users.json"
CHANNELS_FILENAME = "station_v_channels.json"
USERS_CSV_FILENAME = "station_v_users.csv"

CSV_COLUMNS: list[str] = [
    "id",
    "nickname",
    "personality",
    "language",
    "fluency",
    "accent",
    "formality",
    "verbosity",
    "humor",
    "emojiUsage",
    "punctuation",
]
