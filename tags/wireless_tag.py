"""
Модуль для керування тегом Wireless Sensor Tag через хмарний HTTP API.
"""

from typing import Any, Dict, Optional

import requests

from tags.base import BaseTag
from utils.logger import get_logger


class WirelessTag(BaseTag):
    """Тег дверей/вікна, звуковим сигналом якого керуємо через ethClient API."""

    def __init__(self, uuid: str, name: str, config: Dict[str, Any], api_config: Dict[str, Any]):
        """
        Ініціалізація тегу.

        Args:
            uuid: Ідентифікатор тегу
            name: Назва тегу
            config: Конфігурація тегу (slave_id)
            api_config: Секція wireless_tag (base_url, token, timeout)
        """
        super().__init__(uuid, name, config)
        self.logger = get_logger()
        self.slave_id = config.get('slave_id', 0)
        self.base_url = str(api_config.get('base_url', 'https://my.wirelesstag.net')).rstrip('/')
        self.token = api_config.get('token', '')
        self.timeout = max(1.0, min(30.0, float(api_config.get('timeout', 5.0))))

    def _call(self, method: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Виконати один виклик ethClient API.

        Returns:
            JSON відповідь або None при будь-якій помилці
        """
        url = f"{self.base_url}/ethClient.asmx/{method}"
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.exceptions.Timeout:
            self.logger.warning(f"Тег {self.name}: таймаут виклику {method}")
        except requests.exceptions.ConnectionError:
            self.logger.warning(f"Тег {self.name}: помилка з'єднання під час {method}")
        except requests.exceptions.HTTPError as e:
            self.logger.warning(f"Тег {self.name}: HTTP помилка {method}: {e}")
        except ValueError as e:
            self.logger.warning(f"Тег {self.name}: некоректна відповідь {method}: {e}")
        return None

    def beep(self, pattern: int) -> Optional[Any]:
        result = self._call('Beep', {'id': self.slave_id, 'beepDuration': pattern})
        if result is None:
            return None
        return result.get('d', True) if isinstance(result, dict) else result

    def stop_beep(self) -> bool:
        return self._call('StopBeep', {'id': self.slave_id}) is not None

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status['slave_id'] = self.slave_id
        return status
