"""Image payload models."""

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class PreprocessedImage:
    """JPEG payload bounded to the upload budget."""

    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        """Return the payload as a base64 string."""
        return base64.b64encode(self.data).decode("utf-8")
