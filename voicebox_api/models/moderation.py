from enum import Enum


class ModerationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: str) -> "ModerationStatus":
        """
        Case-insensitive lookup. Raises ValueError for unknown values.
        """
        return cls((value or "").strip().upper())
