"""
Головний файл сервісу сповіщень про відкриті двері та вікна.
"""

import argparse
import logging
import signal
import sys
from threading import Event

from api.server import APIServer
from controllers.alert_session import AlertSettings
from controllers.beeper_controller import BeeperController
from controllers.event_router import EventRouter
from notifications.notification_dispatcher import NotificationDispatcher
from scheduling.event_loop import EventLoop
from scheduling.timer_scheduler import TimerScheduler
from tags.tag_manager import TagManager
from utils.config_manager import ConfigManager
from utils.logger import Logger


class DoorAlertApp:
    """Головний клас програми."""

    def __init__(self, config_path: str = "config.yaml", test_mode: bool = False):
        """
        Ініціалізація програми.

        Args:
            config_path: Шлях до файлу конфігурації
            test_mode: Чи запускати з симульованими тегами
        """
        self.config = ConfigManager(config_path)

        if test_mode:
            test_mode_config = self.config.get_section('test_mode')
            test_mode_config['enabled'] = True
            self.config.config['test_mode'] = test_mode_config

        log_config = self.config.get_section('logging')
        logger = Logger()
        logger.setup(
            log_file=log_config.get('log_file', 'logs/door_alert.log'),
            log_level=logging.DEBUG if log_config.get('debug', False) else logging.INFO,
            enable_console=True
        )
        self.logger = logger.get_logger()

        try:
            self.config.validate()
        except ValueError as e:
            self.logger.error(f"Помилка валідації конфігурації: {e}")
            sys.exit(1)

        self.logger.info("Ініціалізація компонентів...")

        self.scheduler = TimerScheduler()
        self.event_loop = EventLoop(self.scheduler)
        self.dispatcher = NotificationDispatcher.from_config(self.config)
        self.beeper = BeeperController.from_config(self.config)
        self.event_router = EventRouter(
            self.scheduler,
            self.dispatcher,
            self.beeper,
            AlertSettings.from_config(self.config)
        )

        self.tag_manager = TagManager(self.config)
        self.tag_manager.bind(self.event_router)

        api_config = self.config.get_section('api')
        if api_config.get('enabled', True):
            self.api_server = APIServer(
                self.tag_manager,
                self.event_router,
                self.event_loop,
                self.config
            )
        else:
            self.api_server = None

        self.shutdown_event = Event()

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.logger.info(
            f"Ініціалізація завершена: тегів={len(self.tag_manager.tags)}, "
            f"сигнал={self.beeper.policy.value}"
        )

    def _signal_handler(self, signum, frame):
        """Обробник сигналів для коректного завершення."""
        self.logger.info(f"Отримано сигнал {signum}, завершення роботи...")
        self.shutdown_event.set()

    def run(self) -> None:
        """Запустити цикл подій."""
        self.logger.info("Запуск сервісу сповіщень")

        if self.config.is_test_mode():
            self.logger.info("⚠️  ТЕСТОВИЙ РЕЖИМ - використовуються симульовані теги")

        if self.api_server:
            self.api_server.start()

        try:
            self.event_loop.run(self.shutdown_event)
        except KeyboardInterrupt:
            self.logger.info("Отримано сигнал переривання")
        except Exception as e:
            self.logger.critical(f"Критична помилка: {e}", exc_info=True)
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Коректне завершення програми."""
        self.logger.info("Завершення роботи програми...")

        if self.api_server:
            self.api_server.stop()

        # Події, що вже стоять у черзі, обробляються до завершення сесій
        self.event_loop.drain()
        self.event_router.shutdown()

        self.logger.info("Програма завершена")


def main():
    """Головна функція."""
    parser = argparse.ArgumentParser(description='Сповіщення про відкриті двері та вікна (Wireless Sensor Tags)')
    parser.add_argument('--config', '-c', default='config.yaml', help='Шлях до файлу конфігурації')
    parser.add_argument('--test-mode', action='store_true', help='Запустити з симульованими тегами')

    args = parser.parse_args()

    app = DoorAlertApp(config_path=args.config, test_mode=args.test_mode)
    app.run()


if __name__ == '__main__':
    main()
