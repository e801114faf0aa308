"""Domain models for daily symptom logs."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

COMMON_SYMPTOMS: tuple[str, ...] = (
    "Hives",
    "Itchy skin",
    "Swelling",
    "Runny nose",
    "Sneezing",
    "Watery eyes",
    "Cough",
    "Wheezing",
    "Shortness of breath",
    "Nausea",
    "Vomiting",
    "Diarrhea",
    "Stomach pain",
    "Headache",
    "Dizziness",
    "Fatigue",
    "Anxiety",
    "Difficulty swallowing",
    "Throat tightness",
    "Rapid heartbeat",
)


class SeverityLevel(str, Enum):
    """Reported severity of a day's symptoms."""

    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @classmethod
    def from_string(cls, value: str | None) -> "SeverityLevel":
        """Parse a severity label, defaulting to none."""
        normalized = (value or "").strip().lower()
        for level in cls:
            if level.value == normalized:
                return level
        return cls.NONE

    @property
    def rank(self) -> int:
        """Ordering index used for sorting and comparison."""
        return list(SeverityLevel).index(self)


@dataclass(frozen=True)
class SymptomLog:
    """A single day's symptom entry."""

    id: str
    date: date
    symptoms: list[str]
    notes: str
    took_medication: bool
    severity: str
    created_at: datetime
    updated_at: datetime | None = None

    @property
    def has_symptoms(self) -> bool:
        return bool(self.symptoms)

    @property
    def symptom_count(self) -> int:
        return len(self.symptoms)

    @property
    def severity_level(self) -> int:
        return SeverityLevel.from_string(self.severity).rank


def symptom_log_id(day: date) -> str:
    """Return the per-day identifier for a symptom log."""
    return f"symptom_{day.year}_{day.month:02d}_{day.day:02d}"
