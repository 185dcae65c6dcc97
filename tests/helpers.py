"""
Допоміжні класи для тестів: керований годинник та канал-записувач.
"""

from typing import Optional

from notifications.base import NotificationChannel
from scheduling.timer_scheduler import TimerScheduler

MINUTE = 60.0


class FakeClock:
    """Керований вручну годинник (секунди)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class RecordingChannel(NotificationChannel):
    """Канал, що запам'ятовує повідомлення або падає з заданою помилкою."""

    def __init__(self, name: str = 'recording', enabled: bool = True, error: Optional[Exception] = None):
        self.name = name
        self.enabled = enabled
        self.error = error
        self.sent = []

    def is_enabled(self) -> bool:
        return self.enabled

    def send(self, subject, message, category=None):
        if self.error is not None:
            raise self.error
        self.sent.append((subject, message, category))

    @property
    def messages(self):
        return [message for _, message, _ in self.sent]


def advance(clock: FakeClock, scheduler: TimerScheduler, seconds: float) -> None:
    """Перемістити годинник вперед, виконуючи кожен таймер точно в його час."""
    target = clock.now + seconds
    while True:
        due = scheduler.next_due()
        if due is None or due > target:
            break
        clock.now = max(clock.now, due)
        scheduler.run_pending()
    clock.now = target
    scheduler.run_pending()
