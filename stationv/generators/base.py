"""Base generator interface."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence

from stationv.models import UserDraft


class BaseGenerator(ABC):
    """All generation strategies must implement this interface.

    Generators only return candidate drafts; committing them is up to the
    caller.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    @abstractmethod
    async def generate(self, count: int, existing_nicknames: Sequence[str]) -> list[UserDraft]:
        """Return *count* candidate users."""
        ...
