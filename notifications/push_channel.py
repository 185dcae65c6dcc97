"""
Канал push-сповіщень через ntfy.
"""

from typing import Any, Dict, Optional

import requests

from notifications.base import NotificationChannel
from utils.logger import get_logger


class PushChannel(NotificationChannel):
    """Публікує сповіщення в топік ntfy (сервер налаштовується)."""

    name = 'push'

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Секція notifications.push (target, server, priority, timeout)
        """
        self.logger = get_logger()
        self.target = (config.get('target') or '').strip()
        self.server = str(config.get('server', 'https://ntfy.sh')).rstrip('/')
        self.priority = str(config.get('priority', 'high'))
        self.timeout = max(1.0, min(30.0, float(config.get('timeout', 5.0))))

    def is_enabled(self) -> bool:
        return bool(self.target)

    def send(self, subject: str, message: str, category: Optional[str] = None) -> None:
        # Заголовки HTTP тільки latin-1, тому title передається в query
        params = {
            'title': subject,
            'priority': self.priority,
        }
        if category:
            params['tags'] = category

        response = requests.post(
            f"{self.server}/{self.target}",
            data=message.encode('utf-8'),
            params=params,
            timeout=self.timeout
        )
        response.raise_for_status()
        self.logger.debug(f"Push: сповіщення відправлено в {self.target}")
