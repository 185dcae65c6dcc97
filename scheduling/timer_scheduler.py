"""
Планувальник відкладених та періодичних викликів.

Всі таймери виконуються в потоці, що викликає run_pending(), тому
обробники ніколи не виконуються паралельно.
"""

import heapq
import itertools
import time
from typing import Any, Callable, List, Optional, Tuple

from utils.logger import get_logger


class TimerHandle:
    """Посилання на запланований виклик, за яким його можна скасувати."""

    def __init__(
        self,
        timer_id: int,
        due: float,
        interval: Optional[float],
        callback: Callable[..., Any],
        args: Tuple[Any, ...]
    ):
        self.timer_id = timer_id
        self.due = due
        self.interval = interval
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    @property
    def active(self) -> bool:
        """True поки виклик ще може відбутися."""
        return not self.cancelled and not (self.fired and not self.repeating)

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.repeating else "once"
        return f"<TimerHandle #{self.timer_id} {kind} due={self.due:.3f}>"


class TimerScheduler:
    """Планувальник таймерів поверх інжектованого монотонного годинника."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Функція, що повертає поточний час у секундах
        """
        self.clock = clock
        self.logger = get_logger()
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()
        self._ids = itertools.count(1)

    def now(self) -> float:
        """Поточний час годинника планувальника."""
        return self.clock()

    def schedule_once(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Запланувати одноразовий виклик через delay секунд."""
        return self._schedule(delay, None, callback, args)

    def schedule_repeating(self, interval: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Запланувати періодичний виклик кожні interval секунд."""
        if interval <= 0:
            raise ValueError(f"Інтервал повинен бути додатним: {interval}")
        return self._schedule(interval, interval, callback, args)

    def _schedule(
        self,
        delay: float,
        interval: Optional[float],
        callback: Callable[..., Any],
        args: Tuple[Any, ...]
    ) -> TimerHandle:
        handle = TimerHandle(next(self._ids), self.now() + max(0.0, delay), interval, callback, args)
        self._push(handle)
        self.logger.debug(f"Таймер [{handle.timer_id}] заплановано: {handle!r}")
        return handle

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """
        Скасувати таймер.

        Безпечно для None, вже скасованих та вже виконаних таймерів.
        """
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        self.logger.debug(f"Таймер [{handle.timer_id}] зупинено")

    def next_due(self) -> Optional[float]:
        """Час найближчого активного таймера або None."""
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def pending_count(self) -> int:
        """Кількість активних таймерів."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def run_pending(self) -> int:
        """
        Виконати всі таймери, час яких настав.

        Returns:
            Кількість виконаних викликів
        """
        fired = 0
        now = self.now()

        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            handle.fired = True
            if handle.repeating:
                # Від запланованого часу, а не від now, щоб повтори не "пливли"
                handle.due += handle.interval
                self._push(handle)

            fired += 1
            try:
                handle.callback(*handle.args)
            except Exception as e:
                self.logger.error(f"Помилка в обробнику таймера [{handle.timer_id}]: {e}", exc_info=True)

        return fired
