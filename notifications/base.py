"""
Базовий клас для каналів сповіщень.
"""

from abc import ABC, abstractmethod
from typing import Optional


class NotificationChannel(ABC):
    """Один канал доставки сповіщень (лог, IFTTT, email, push)."""

    name = 'channel'

    @abstractmethod
    def is_enabled(self) -> bool:
        """True якщо канал налаштований і має використовуватись."""

    @abstractmethod
    def send(self, subject: str, message: str, category: Optional[str] = None) -> None:
        """
        Відправити сповіщення.

        Помилки доставки піднімаються як винятки; ізоляцію між каналами
        забезпечує NotificationDispatcher.
        """
