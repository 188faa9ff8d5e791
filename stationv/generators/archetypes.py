"""Personality archetype catalog, read from a bundled TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_CATALOG = "personalities"


@dataclass(frozen=True)
class Archetype:
    name: str
    description: str


@lru_cache(maxsize=None)
def load_archetypes(catalog: str = _CATALOG) -> tuple[Archetype, ...]:
    """Read ``templates/<catalog>.toml`` and return its archetypes."""
    path = (_TEMPLATES_DIR / f"{catalog}.toml").resolve()
    if not path.is_relative_to(_TEMPLATES_DIR.resolve()):
        raise ValueError(f"Catalog name escapes templates directory: {catalog}")
    if not path.exists():
        raise FileNotFoundError(f"Archetype catalog not found: {path}")

    with path.open("rb") as fh:
        data = tomllib.load(fh)

    archetypes = tuple(
        Archetype(name=entry["name"], description=entry["description"])
        for entry in data.get("archetype", [])
    )
    if not archetypes:
        raise ValueError(f"Archetype catalog is empty: {path}")
    return archetypes
