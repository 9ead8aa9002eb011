"""Daily call budget for the model analyzer."""

from datetime import date
from typing import Callable, Optional


class DailyUsage:
    """Counts calls per calendar day and refuses past ``limit``."""

    def __init__(self, limit: int, today: Optional[Callable[[], date]] = None):
        self.limit = limit
        self._today = today or date.today
        self._day = self._today()
        self._count = 0

    def _roll(self) -> None:
        day = self._today()
        if day != self._day:
            self._day = day
            self._count = 0

    @property
    def count(self) -> int:
        self._roll()
        return self._count

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)

    def try_consume(self) -> bool:
        """Record one call if the budget allows it."""
        self._roll()
        if self._count >= self.limit:
            return False
        self._count += 1
        return True

    def reset(self) -> None:
        self._count = 0
