import enum
from typing import Any


class BaseEnum(str, enum.Enum):
    @classmethod
    def has(cls, item: Any) -> bool:
        try:
            cls(item)
        except ValueError:
            return False
        else:
            return True

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def list_all(cls) -> list[str]:
        return [e.value for e in cls]

    @classmethod
    def allowed_message(cls, label: str) -> str:
        """
        Human readable rejection used by validators:
            Invalid status. Allowed: draft, planned, ...
        """
        return f'Invalid {label}. Allowed: {", ".join(cls.list_all())}'
