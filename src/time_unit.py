from enum import Enum
from typing import Final, Union


class TimeUnit(Enum):
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"

    @property
    def seconds(self) -> float:
        return UNIT_SECONDS[self.value]

    @classmethod
    def parse(cls, value: Union["TimeUnit", str]) -> "TimeUnit":
        """Accepts a member or its name in any case ('seconds', 'MINUTES')."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            names = ", ".join(unit.name for unit in cls)
            raise ValueError(f"Unknown time unit {value!r}, expected one of: {names}") from None


UNIT_SECONDS: Final[dict[str, float]] = {
    "MILLISECONDS": 0.001,
    "SECONDS": 1.0,
    "MINUTES": 60.0,
    "HOURS": 3600.0,
    "DAYS": 86400.0,
}
