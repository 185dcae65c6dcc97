"""
Модуль логування подій сервісу сповіщень про відкриті двері та вікна.
"""

import logging
from pathlib import Path
from typing import Optional


LOGGER_NAME = 'door_alert'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class Logger:
    """Singleton для налаштування логера сервісу."""

    _instance: Optional['Logger'] = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not Logger._initialized:
            self.logger: Optional[logging.Logger] = None
            Logger._initialized = True

    def setup(
        self,
        log_file: Optional[str] = "logs/door_alert.log",
        log_level: int = logging.INFO,
        enable_console: bool = True
    ) -> None:
        """
        Налаштувати логування.

        Args:
            log_file: Шлях до файлу логів (None - без файлу)
            log_level: Рівень логування
            enable_console: Чи виводити логи в консоль
        """
        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(log_level)
        self.logger.handlers.clear()

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        if enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(log_level)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

    def get_logger(self) -> logging.Logger:
        """
        Отримати об'єкт logger.

        Якщо логування ще не налаштоване, повертається логер без власних
        обробників, записи якого йдуть до кореневого логера.
        """
        if self.logger is None:
            self.logger = logging.getLogger(LOGGER_NAME)
        return self.logger


def get_logger() -> logging.Logger:
    """Отримати глобальний logger сервісу."""
    return Logger().get_logger()
