"""Import/export dialects and the import dispatcher."""

from __future__ import annotations

import random
from enum import Enum
from pathlib import Path

from stationv.constants import (
    CHANNELS_FILENAME,
    ENRICHED_USERS_FILENAME,
    USERS_CSV_FILENAME,
    USERS_JSON_FILENAME,
    WORLD_FILENAME,
)
from stationv.errors import UnsupportedFormatError
from stationv.formats.csv_format import parse_csv, write_csv
from stationv.formats.json_formats import (
    parse_json,
    write_channels,
    write_enriched_users,
    write_users,
    write_world,
)
from stationv.models import VirtualUser, World
from stationv.repository import WorldRepository


class ImportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class ExportDialect(str, Enum):
    WORLD = "world"
    USERS = "users"
    ENRICHED = "enriched"
    CHANNELS = "channels"
    CSV = "csv"


EXPORT_FILENAMES: dict[ExportDialect, str] = {
    ExportDialect.WORLD: WORLD_FILENAME,
    ExportDialect.USERS: USERS_JSON_FILENAME,
    ExportDialect.ENRICHED: ENRICHED_USERS_FILENAME,
    ExportDialect.CHANNELS: CHANNELS_FILENAME,
    ExportDialect.CSV: USERS_CSV_FILENAME,
}


def format_from_filename(filename: str) -> ImportFormat:
    """Map a file extension to an import format."""
    suffix = Path(filename).suffix.lower().lstrip(".")
    try:
        return ImportFormat(suffix)
    except ValueError:
        raise UnsupportedFormatError(
            "Unsupported file type. Please use .json or .csv"
        ) from None


def parse_import(text: str, fmt: ImportFormat | str) -> World | list[VirtualUser]:
    """Parse *text* in the declared format without touching any repository.

    JSON yields either a :class:`World` or a plain user list depending on its
    shape; CSV always yields a user list.
    """
    try:
        fmt = ImportFormat(fmt)
    except ValueError:
        raise UnsupportedFormatError(f"Unsupported import format: {fmt}") from None
    if fmt is ImportFormat.JSON:
        return parse_json(text)
    return parse_csv(text)


def import_into(
    repo: WorldRepository,
    text: str,
    fmt: ImportFormat | str,
) -> World | list[VirtualUser]:
    """Parse fully, then merge into *repo*. A parse error leaves *repo* unchanged."""
    parsed = parse_import(text, fmt)
    if isinstance(parsed, World):
        repo.import_world(parsed)
    else:
        repo.import_users(parsed)
    return parsed


def render_export(
    repo: WorldRepository,
    dialect: ExportDialect | str,
    rng: random.Random | None = None,
) -> str:
    dialect = ExportDialect(dialect)
    if dialect is ExportDialect.WORLD:
        return write_world(repo.world())
    if dialect is ExportDialect.USERS:
        return write_users(repo.users)
    if dialect is ExportDialect.ENRICHED:
        return write_enriched_users(repo.users, rng)
    if dialect is ExportDialect.CHANNELS:
        return write_channels(repo.channels)
    return write_csv(repo.users)


__all__ = [
    "EXPORT_FILENAMES",
    "ExportDialect",
    "ImportFormat",
    "format_from_filename",
    "import_into",
    "parse_csv",
    "parse_import",
    "parse_json",
    "render_export",
    "write_channels",
    "write_csv",
    "write_enriched_users",
    "write_users",
    "write_world",
]
