"""
Розсилка сповіщень по всіх увімкнених каналах.
"""

from typing import Dict, List, Optional

from notifications.base import NotificationChannel
from notifications.email_channel import EmailChannel
from notifications.ifttt_channel import IftttChannel
from notifications.log_channel import LogChannel
from notifications.push_channel import PushChannel
from utils.config_manager import ConfigManager
from utils.logger import get_logger


class NotificationDispatcher:
    """
    Розсилає повідомлення в усі увімкнені канали.

    Помилка будь-якого каналу логується і не заважає іншим каналам.
    Повідомлення відправляється не більше одного разу, повторів немає.
    """

    def __init__(self, channels: List[NotificationChannel]):
        """
        Args:
            channels: Канали у порядку розсилки
        """
        self.channels = channels
        self.logger = get_logger()
        self.sent_count = 0
        self.failed_count = 0

    @classmethod
    def from_config(cls, config: ConfigManager) -> 'NotificationDispatcher':
        """Створити диспетчер з усіма каналами з конфігурації."""
        notifications = config.get_section('notifications')
        channels: List[NotificationChannel] = [
            LogChannel(),
            IftttChannel(notifications.get('ifttt') or {}),
            EmailChannel(config.get_email_recipients(), notifications.get('email') or {}),
            PushChannel(notifications.get('push') or {}),
        ]
        dispatcher = cls(channels)
        enabled = [c.name for c in dispatcher.enabled_channels()]
        dispatcher.logger.info(f"Канали сповіщень: {', '.join(enabled)}")
        return dispatcher

    def enabled_channels(self) -> List[NotificationChannel]:
        return [channel for channel in self.channels if channel.is_enabled()]

    def notify(self, subject: str, message: str, category: Optional[str] = None) -> Dict[str, bool]:
        """
        Відправити повідомлення в усі увімкнені канали.

        Args:
            subject: Тема (назва тегу)
            message: Текст повідомлення
            category: Категорія для push-каналу ("motion"/"temperature")

        Returns:
            Словник {назва_каналу: чи_успішно}
        """
        results: Dict[str, bool] = {}

        for channel in self.channels:
            if not channel.is_enabled():
                continue
            try:
                channel.send(subject, message, category)
                results[channel.name] = True
                self.sent_count += 1
            except Exception as e:
                self.logger.error(f"Канал {channel.name}: помилка відправки сповіщення '{message}': {e}")
                results[channel.name] = False
                self.failed_count += 1

        return results
