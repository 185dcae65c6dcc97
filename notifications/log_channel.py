"""
Канал сповіщень у лог програми.
"""

import logging
from typing import Optional

from notifications.base import NotificationChannel
from utils.logger import get_logger


class LogChannel(NotificationChannel):
    """Записує кожне сповіщення в лог. Завжди увімкнений."""

    name = 'log'

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger()

    def is_enabled(self) -> bool:
        return True

    def send(self, subject: str, message: str, category: Optional[str] = None) -> None:
        self.logger.info(f"[{category or 'alert'}] {subject}: {message}")
