"""World JSON, user-array JSON (plain and enriched) and channel JSON."""

from __future__ import annotations

import json
import random
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from stationv.constants import PRESENCE_INTERVAL_MAX, PRESENCE_INTERVAL_MIN
from stationv.errors import ImportValidationError, UnsupportedFormatError
from stationv.formats.prompt import build_system_prompt
from stationv.models import Channel, ExportedUser, VirtualUser, World


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def write_world(world: World) -> str:
    return _dumps(world.to_dict())


def write_users(users: Iterable[VirtualUser]) -> str:
    """Plain user array, suitable for re-import."""
    return _dumps([u.to_dict() for u in users])


def write_channels(channels: Iterable[Channel]) -> str:
    return _dumps([c.to_dict() for c in channels])


def enrich_user(user: VirtualUser, rng: random.Random | None = None) -> ExportedUser:
    """Project *user* into the simulator's export shape."""
    rng = rng or random
    return ExportedUser(
        **user.model_dump(),
        system_prompt=build_system_prompt(user),
        enabled=True,
        presence_interval=rng.randint(PRESENCE_INTERVAL_MIN, PRESENCE_INTERVAL_MAX),
    )


def write_enriched_users(users: Iterable[VirtualUser], rng: random.Random | None = None) -> str:
    """User array with ``system_prompt``, ``enabled`` and ``presence_interval``.

    Write-only: the importer never expects these fields.
    """
    return _dumps([enrich_user(u, rng).to_dict() for u in users])


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _missing_required(records: list[Any], fields: tuple[str, ...]) -> list[str]:
    problems: list[str] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            problems.append(f"item {index} is not an object")
            continue
        absent = [f for f in fields if not record.get(f)]
        if absent:
            problems.append(f"item {index} lacks {', '.join(absent)}")
    return problems


def _validation_problems(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


def parse_users(data: list[Any]) -> list[VirtualUser]:
    problems = _missing_required(data, ("id", "nickname"))
    if problems:
        raise ImportValidationError(
            "Invalid user file. Users are missing required fields.", problems=problems
        )
    try:
        return [VirtualUser.model_validate(item) for item in data]
    except ValidationError as exc:
        raise ImportValidationError(
            "Invalid user file.", problems=_validation_problems(exc)
        ) from exc


def parse_world(data: dict[str, Any]) -> World:
    problems = [
        f"users: {p}" for p in _missing_required(data["users"], ("id", "nickname"))
    ] + [
        f"channels: {p}" for p in _missing_required(data["channels"], ("id", "name"))
    ]
    if problems:
        raise ImportValidationError(
            "Invalid world file. Users or channels are missing required fields.",
            problems=problems,
        )
    try:
        return World.model_validate({"users": data["users"], "channels": data["channels"]})
    except ValidationError as exc:
        raise ImportValidationError(
            "Invalid world file.", problems=_validation_problems(exc)
        ) from exc


def _is_world(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("users"), list)
        and isinstance(data.get("channels"), list)
    )


def parse_json(text: str) -> World | list[VirtualUser]:
    """Parse a world object or a bare user array, chosen by shape."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportValidationError(f"File is not valid JSON: {exc.msg}") from exc
    if _is_world(data):
        return parse_world(data)
    if isinstance(data, list):
        return parse_users(data)
    raise UnsupportedFormatError(
        "Unsupported JSON structure. Expected a world object or a user array."
    )
