"""
Канал сповіщень через вебхук IFTTT (Maker Webhooks).
"""

from typing import Any, Dict, Optional

import requests

from notifications.base import NotificationChannel
from utils.logger import get_logger

# Допустимий діапазон типу тригера: 2 < type <= 255
MIN_TRIGGER_TYPE = 2
MAX_TRIGGER_TYPE = 255


def is_valid_trigger_type(trigger_type: Any) -> bool:
    """Перевірити, що тип тригера лежить у зарезервованому діапазоні."""
    if isinstance(trigger_type, bool) or not isinstance(trigger_type, int):
        return False
    return MIN_TRIGGER_TYPE < trigger_type <= MAX_TRIGGER_TYPE


class IftttChannel(NotificationChannel):
    """Відправляє сповіщення як подію IFTTT з типом тригера."""

    name = 'ifttt'

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Секція notifications.ifttt (trigger_type, event_name, key, timeout)
        """
        self.logger = get_logger()
        self.trigger_type = config.get('trigger_type', 0)
        self.event_name = config.get('event_name', 'tag_alert')
        self.key = config.get('key', '')
        self.base_url = str(config.get('base_url', 'https://maker.ifttt.com')).rstrip('/')
        self.timeout = max(1.0, min(30.0, float(config.get('timeout', 5.0))))

        if is_valid_trigger_type(self.trigger_type) and not self.key:
            self.logger.warning("IFTTT: тип тригера вказано, але ключ відсутній. Канал вимкнено")

    def is_enabled(self) -> bool:
        return is_valid_trigger_type(self.trigger_type) and bool(self.key)

    def _build_url(self) -> str:
        return f"{self.base_url}/trigger/{self.event_name}/with/key/{self.key}"

    def send(self, subject: str, message: str, category: Optional[str] = None) -> None:
        payload = {
            'value1': subject,
            'value2': message,
            'value3': self.trigger_type,
        }
        response = requests.post(self._build_url(), json=payload, timeout=self.timeout)
        response.raise_for_status()
        self.logger.debug(f"IFTTT: подію {self.event_name} відправлено ({response.status_code})")
