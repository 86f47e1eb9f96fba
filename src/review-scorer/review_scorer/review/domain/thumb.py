"""ThumbDirection — an aggregator's editorial up/meh/down call on a review."""

from enum import StrEnum

_ALIASES: dict[str, str] = {
    "up": "Up",
    "rave": "Up",
    "positive": "Up",
    "fresh": "Up",
    "meh": "Meh",
    "flat": "Meh",
    "mixed": "Meh",
    "down": "Down",
    "pan": "Down",
    "negative": "Down",
    "rotten": "Down",
}


class ThumbDirection(StrEnum):
    UP = "Up"
    MEH = "Meh"
    DOWN = "Down"

    @classmethod
    def parse(cls, value: str | None) -> "ThumbDirection | None":
        """Normalize aggregator vocabulary (Fresh, Flat, Rotten, ...) to a direction.

        Returns None for empty or unrecognized values.
        """
        if not value:
            return None
        canonical = _ALIASES.get(value.strip().lower())
        return cls(canonical) if canonical is not None else None
