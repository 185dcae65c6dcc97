"""
Однопотоковий цикл подій сервісу.

Події тегів (з HTTP, від обладнання) та таймери обробляються в одному
потоці, строго в порядку надходження. Інші потоки тільки ставлять події
в чергу через post().
"""

import queue
from threading import Event
from typing import Any, Callable, Optional

from scheduling.timer_scheduler import TimerScheduler
from utils.logger import get_logger


class EventLoop:
    """Цикл, що по черзі виконує події з черги та таймери планувальника."""

    def __init__(self, scheduler: TimerScheduler, poll_interval: float = 1.0):
        """
        Args:
            scheduler: Планувальник таймерів
            poll_interval: Максимальний час очікування між перевірками (секунди)
        """
        self.scheduler = scheduler
        self.poll_interval = poll_interval
        self.logger = get_logger()
        self._inbox: "queue.Queue" = queue.Queue()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Поставити виклик у чергу. Можна викликати з будь-якого потоку."""
        self._inbox.put((callback, args))

    def run_once(self, timeout: float = 0.0) -> int:
        """
        Обробити події з черги, а потім таймери, час яких настав.

        Args:
            timeout: Скільки чекати на першу подію, якщо черга порожня

        Returns:
            Кількість виконаних обробників
        """
        handled = 0
        block = timeout > 0

        while True:
            try:
                callback, args = self._inbox.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                break
            block = False

            handled += 1
            try:
                callback(*args)
            except Exception as e:
                self.logger.error(f"Помилка обробки події {getattr(callback, '__name__', callback)}: {e}", exc_info=True)

        return handled + self.scheduler.run_pending()

    def _wait_time(self) -> float:
        next_due = self.scheduler.next_due()
        if next_due is None:
            return self.poll_interval
        return max(0.0, min(self.poll_interval, next_due - self.scheduler.now()))

    def run(self, stop_event: Event) -> None:
        """Крутити цикл до встановлення stop_event."""
        self.logger.info("Цикл подій запущено")
        while not stop_event.is_set():
            # Події з черги будять цикл одразу, таймери - по next_due
            self.run_once(timeout=self._wait_time() or 0.001)
        self.logger.info("Цикл подій зупинено")

    def pending_events(self) -> int:
        return self._inbox.qsize()

    def drain(self, stop_event: Optional[Event] = None) -> None:
        """Обробити все, що вже стоїть у черзі (без очікування)."""
        while not self._inbox.empty() and not (stop_event and stop_event.is_set()):
            self.run_once()
