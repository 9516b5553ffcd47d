"""Record store for saved food analyses."""

from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from meal_lens.domain.errors import StorageError
from meal_lens.domain.records import FoodAnalysisRecord
from meal_lens.services.storage import RECORDS_KEY, KeyValueStore

_RECORDS_ADAPTER = TypeAdapter(list[FoodAnalysisRecord])


def encode_records(records: list[FoodAnalysisRecord]) -> str:
    """Serialize records to the persisted JSON form."""
    return _RECORDS_ADAPTER.dump_json(records).decode("utf-8")


def decode_records(raw: str) -> list[FoodAnalysisRecord]:
    """Parse records from the persisted JSON form."""
    return _RECORDS_ADAPTER.validate_json(raw)


@dataclass
class RecordStore:
    """Ordered list of records persisted atomically under one storage slot."""

    storage: KeyValueStore
    key: str = RECORDS_KEY

    def list_all(self) -> list[FoodAnalysisRecord]:
        """Return all records in insertion order."""
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            return decode_records(raw)
        except ValidationError as exc:
            raise StorageError("Saved analyses could not be decoded") from exc

    def get(self, record_id: UUID) -> FoodAnalysisRecord | None:
        """Return a record by id."""
        return next((r for r in self.list_all() if r.id == record_id), None)

    def save(self, record: FoodAnalysisRecord) -> None:
        """Append a record."""
        records = self.list_all()
        records.append(record)
        self._write(records)

    def update(self, record: FoodAnalysisRecord) -> bool:
        """Replace the record with the same id; returns False if absent."""
        records = self.list_all()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                self._write(records)
                return True
        return False

    def delete(self, record_id: UUID) -> bool:
        """Remove a record by id; returns False if absent."""
        records = self.list_all()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        return True

    def clear(self) -> None:
        """Remove every saved record."""
        self.storage.remove(self.key)

    def for_day(self, day: date, tz: tzinfo) -> list[FoodAnalysisRecord]:
        """Return records created on a calendar day in the given timezone."""
        return [
            record
            for record in self.list_all()
            if record.created_at.astimezone(tz).date() == day
        ]

    def total_calories_for(self, day: date, tz: tzinfo) -> int:
        """Sum total calories for a calendar day."""
        return sum(r.total_calories for r in self.for_day(day, tz))

    def weekly_calories(self, today: date, tz: tzinfo) -> list[tuple[date, int]]:
        """Return daily calories for the seven days ending today, oldest first."""
        records = self.list_all()
        totals: dict[date, int] = {}
        for record in records:
            day = record.created_at.astimezone(tz).date()
            totals[day] = totals.get(day, 0) + record.total_calories
        days = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
        return [(day, totals.get(day, 0)) for day in days]

    def _write(self, records: list[FoodAnalysisRecord]) -> None:
        self.storage.set(self.key, encode_records(records))
