"""Key-value storage abstraction."""

from typing import Protocol

CREDENTIAL_KEY = "OpenAI_API_Key"
RECORDS_KEY = "SavedFoodAnalyses"


class KeyValueStore(Protocol):
    """Durable string slots addressed by key."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None when the slot is empty."""

    def set(self, key: str, value: str) -> None:
        """Store a value in a slot."""

    def remove(self, key: str) -> None:
        """Delete a slot if present."""
