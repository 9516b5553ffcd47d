"""API credential storage and validation."""

import logging
from dataclasses import dataclass, field

from meal_lens.services.storage import CREDENTIAL_KEY, KeyValueStore

CREDENTIAL_PREFIX = "sk-"
MIN_CREDENTIAL_LENGTH = 20

_logger = logging.getLogger(__name__)


def is_valid_credential(value: str) -> bool:
    """Return True when a credential has the expected shape."""
    return (
        bool(value)
        and value.startswith(CREDENTIAL_PREFIX)
        and len(value) >= MIN_CREDENTIAL_LENGTH
    )


def mask_credential(value: str) -> str:
    """Return a log-safe representation of a credential."""
    if not value:
        return "<empty>"
    return f"{value[:5]}... (length: {len(value)})"


@dataclass
class CredentialStore:
    """Holds the inference credential with storage as the source of truth."""

    storage: KeyValueStore
    key: str = CREDENTIAL_KEY
    _value: str = field(default="", init=False, repr=False)

    def __post_init__(self) -> None:
        self._value = self.storage.get(self.key) or ""

    def set(self, value: str) -> None:
        """Persist a credential; an empty value removes the stored entry."""
        self._value = value
        if value:
            self.storage.set(self.key, value)
        else:
            self.storage.remove(self.key)

        stored = self.storage.get(self.key) or ""
        if stored == value:
            _logger.info("Credential saved: %s", mask_credential(value))
        else:
            _logger.warning(
                "Credential save verification failed: wrote %s, read %s",
                mask_credential(value),
                mask_credential(stored),
            )

    def get(self) -> str:
        """Return the persisted credential, re-syncing the cache on divergence."""
        fresh = self.storage.get(self.key) or ""
        if fresh != self._value:
            _logger.info(
                "Credential changed in storage: %s -> %s",
                mask_credential(self._value),
                mask_credential(fresh),
            )
            self._value = fresh
        return self._value

    def is_valid(self) -> bool:
        """Return True when the current credential has a valid shape."""
        return is_valid_credential(self.get())

    def clear(self) -> None:
        """Remove the stored credential."""
        self.set("")

    def masked(self) -> str:
        """Return the current credential masked for display."""
        return mask_credential(self.get())
