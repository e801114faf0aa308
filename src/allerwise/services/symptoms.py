"""Symptom log service."""

from collections import Counter
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from allerwise.domain.symptoms import SeverityLevel, SymptomLog, symptom_log_id
from allerwise.errors import InvalidInputError, NotFoundError


class SymptomLogRepository(Protocol):
    """Persistence interface for symptom logs."""

    def upsert_log(self, user_id: UUID, log: SymptomLog) -> None:
        """Create or overwrite a log keyed by its id."""

    def get_log(self, user_id: UUID, log_id: str) -> SymptomLog | None:
        """Return one log, if present."""

    def list_logs(self, user_id: UUID) -> list[SymptomLog]:
        """Return all logs for a user."""

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        """Delete one log."""


@dataclass
class SymptomLogService:
    """Daily symptom logging with calendar helpers and statistics."""

    repository: SymptomLogRepository

    def save_log(  # noqa: PLR0913
        self,
        user_id: UUID,
        day: date,
        symptoms: list[str],
        notes: str,
        took_medication: bool,
        severity: str,
    ) -> SymptomLog:
        """Save the log for a day, replacing any existing entry for that day."""
        log_id = symptom_log_id(day)
        existing = self.repository.get_log(user_id, log_id)
        now = datetime.now(tz=UTC)
        log = SymptomLog(
            id=log_id,
            date=day,
            symptoms=_dedupe(symptoms),
            notes=notes.strip(),
            took_medication=took_medication,
            severity=_validate_severity(severity),
            created_at=existing.created_at if existing else now,
            updated_at=now if existing else None,
        )
        self.repository.upsert_log(user_id, log)
        return log

    def update_log(self, user_id: UUID, log_id: str, **changes: object) -> SymptomLog:
        """Apply field changes to an existing log."""
        existing = self.repository.get_log(user_id, log_id)
        if existing is None:
            raise NotFoundError(f"Symptom log {log_id} not found")
        if "severity" in changes:
            changes["severity"] = _validate_severity(str(changes["severity"]))
        if "symptoms" in changes:
            changes["symptoms"] = _dedupe(list(changes["symptoms"]))
        updated = replace(existing, **changes, updated_at=datetime.now(tz=UTC))
        self.repository.upsert_log(user_id, updated)
        return updated

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        self.repository.delete_log(user_id, log_id)

    def list_logs(self, user_id: UUID) -> list[SymptomLog]:
        """Return all logs, newest day first."""
        return sorted(
            self.repository.list_logs(user_id), key=lambda log: log.date, reverse=True
        )

    def get_log_for_date(self, user_id: UUID, day: date) -> SymptomLog | None:
        return self.repository.get_log(user_id, symptom_log_id(day))

    def dates_with_logs(self, user_id: UUID) -> list[date]:
        """Return the days that have a log, for calendar markers."""
        return [log.date for log in self.list_logs(user_id)]

    def recent_logs(
        self, user_id: UUID, days: int = 7, today: date | None = None
    ) -> list[SymptomLog]:
        """Return logs from the last ``days`` days, newest first."""
        cutoff = (today or datetime.now(tz=UTC).date()) - timedelta(days=days)
        return [log for log in self.list_logs(user_id) if log.date > cutoff]

    def symptom_stats(self, user_id: UUID) -> dict[str, int]:
        """Count how often each symptom was reported."""
        counts: Counter[str] = Counter()
        for log in self.repository.list_logs(user_id):
            counts.update(log.symptoms)
        return dict(counts)

    def severity_stats(self, user_id: UUID) -> dict[str, int]:
        """Count logs by severity, ignoring days without symptoms."""
        counts = Counter(
            log.severity
            for log in self.repository.list_logs(user_id)
            if log.has_symptoms
        )
        return dict(counts)

    def medication_stats(self, user_id: UUID) -> dict[str, int]:
        """Count symptomatic days with and without medication."""
        with_medication = 0
        without_medication = 0
        for log in self.repository.list_logs(user_id):
            if not log.has_symptoms:
                continue
            if log.took_medication:
                with_medication += 1
            else:
                without_medication += 1
        return {
            "with_medication": with_medication,
            "without_medication": without_medication,
        }


def _validate_severity(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in {level.value for level in SeverityLevel}:
        raise InvalidInputError(f"Unknown severity: {value}")
    return normalized


def _dedupe(symptoms: list[str]) -> list[str]:
    seen: list[str] = []
    for symptom in symptoms:
        cleaned = str(symptom).strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen
