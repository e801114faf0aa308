"""Allergen vocabulary and verdict types."""

from enum import Enum

# The 14 allergens that must be declared on EU/UK food labels.
MAJOR_ALLERGENS: tuple[str, ...] = (
    "Peanuts",
    "Tree nuts",
    "Milk",
    "Eggs",
    "Soya",
    "Wheat",
    "Sesame",
    "Celery",
    "Mustard",
    "Fish",
    "Crustaceans",
    "Molluscs",
    "Lupin",
    "Sulphites",
)


class AllergenVerdict(str, Enum):
    """Risk classification of a scanned product for one user."""

    SAFE = "safe"
    RISKY = "risky"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "AllergenVerdict":
        """Parse a stored verdict, treating anything unrecognised as unknown."""
        normalized = (value or "").strip().lower()
        for verdict in cls:
            if verdict.value == normalized:
                return verdict
        return cls.UNKNOWN

    @property
    def display_text(self) -> str:
        """Short label for the verdict."""
        return _DISPLAY_TEXT[self]

    @property
    def display_icon(self) -> str:
        """Emoji shown next to the verdict."""
        return _DISPLAY_ICON[self]


_DISPLAY_TEXT = {
    AllergenVerdict.SAFE: "Safe",
    AllergenVerdict.RISKY: "Risk Detected",
    AllergenVerdict.UNKNOWN: "Unknown",
}

_DISPLAY_ICON = {
    AllergenVerdict.SAFE: "✅",
    AllergenVerdict.RISKY: "⚠️",
    AllergenVerdict.UNKNOWN: "❓",
}
