"""Denormalised CSV for users: one row per (user, language skill)."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator

from pydantic import ValidationError

from stationv.constants import CSV_COLUMNS
from stationv.errors import ImportValidationError
from stationv.models import VirtualUser

_STYLE_COLUMNS = ("formality", "verbosity", "humor", "emojiUsage", "punctuation")


def _rows(user: VirtualUser) -> Iterator[dict[str, str]]:
    data = user.to_dict()
    base = {
        "id": user.id,
        "nickname": user.nickname,
        "personality": user.personality,
        **{col: data["writingStyle"][col] for col in _STYLE_COLUMNS},
    }
    if not user.language_skills:
        yield {**base, "language": "", "fluency": "", "accent": ""}
        return
    for skill in user.language_skills:
        yield {
            **base,
            "language": skill.language,
            "fluency": skill.fluency.value,
            "accent": skill.accent,
        }


def write_csv(users: Iterable[VirtualUser]) -> str:
    """Every field is quoted and embedded quotes are doubled."""
    buf = io.StringIO()
    writer = csv.DictWriter(
        buf,
        fieldnames=CSV_COLUMNS,
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )
    # The header is written unquoted, as the simulator expects.
    buf.write(",".join(CSV_COLUMNS) + "\n")
    for user in users:
        writer.writerows(_rows(user))
    return buf.getvalue()


def parse_csv(text: str) -> list[VirtualUser]:
    """Re-assemble users from CSV rows grouped by ``id``.

    Skills are appended in row order. The writing style comes from the
    first row of each user; later rows cannot change or blank it.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), skipinitialspace=True)
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
    columns = reader.fieldnames or []
    rows = [row for row in reader if any((row.get(c) or "").strip() for c in columns)]
    if not rows:
        raise ImportValidationError("CSV file is empty or contains only a header.")

    grouped: dict[str, dict] = {}
    for row in rows:
        user_id = row.get("id") or ""
        entry = grouped.setdefault(
            user_id,
            {
                "id": user_id,
                "nickname": row.get("nickname") or "",
                "personality": row.get("personality") or "",
                "languageSkills": [],
            },
        )
        if row.get("language") or row.get("fluency"):
            entry["languageSkills"].append(
                {
                    "language": row.get("language") or "",
                    "fluency": row.get("fluency") or "",
                    "accent": row.get("accent") or "",
                }
            )
        entry.setdefault(
            "writingStyle", {col: row[col] for col in _STYLE_COLUMNS if row.get(col)}
        )

    if any(not e["id"] or not e["nickname"] for e in grouped.values()):
        raise ImportValidationError("CSV file is missing required fields (id, nickname).")
    try:
        return [VirtualUser.model_validate(e) for e in grouped.values()]
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ImportValidationError("Invalid CSV file.", problems=problems) from exc
