"""
Модуль для управління конфігурацією сервісу.
"""

import yaml
from typing import Dict, Any, List, Optional
from pathlib import Path


BEEPER_POLICIES = (
    'off',
    'on_after_delay',
    'on_immediately',
    'on_briefly_on_open_and_close',
)

DELAY_KEYS = (
    'initial_delay_minutes',
    'initial_temperature_delay_minutes',
    'repeat_delay_minutes',
)


class ConfigManager:
    """Клас для завантаження та управління конфігурацією."""

    def __init__(self, config_path: str = "config.yaml"):
        """
        Ініціалізація ConfigManager.

        Args:
            config_path: Шлях до файлу конфігурації
        """
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """Завантажити конфігурацію з файлу."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Файл конфігурації не знайдено: {self.config_path}\n"
                f"Скопіюйте config.example.yaml як config.yaml та налаштуйте його."
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self.config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Помилка парсингу YAML: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Отримати значення з конфігурації за ключем.

        Args:
            key: Ключ у форматі 'section.subsection.key' або просто 'key'
            default: Значення за замовчуванням, якщо ключ не знайдено

        Returns:
            Значення з конфігурації або default
        """
        value = self.config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Отримати всю секцію конфігурації.

        Returns:
            Словник з налаштуваннями секції або порожній словник
        """
        value = self.config.get(section)
        return value if isinstance(value, dict) else {}

    def get_tags(self) -> List[Dict[str, Any]]:
        """Отримати список тегів для моніторингу."""
        tags = self.config.get('tags')
        return tags if isinstance(tags, list) else []

    def is_test_mode(self) -> bool:
        """Перевірити, чи увімкнено тестовий режим."""
        return bool(self.get_section('test_mode').get('enabled', False))

    def get_beeper_policy(self) -> str:
        """Отримати політику звукового сигналу (нижній регістр)."""
        policy = self.get('beeper.policy', 'off')
        # YAML 1.1 читає голе `off` як False
        if policy is None or policy is False:
            return 'off'
        return str(policy).strip().lower()

    def get_email_recipients(self) -> List[str]:
        """
        Розібрати список адрес email, розділених комами.

        Returns:
            Список адрес без порожніх елементів
        """
        raw: Optional[str] = self.get('notifications.email.recipients', '')
        if not raw:
            return []
        if isinstance(raw, list):
            raw = ','.join(str(r) for r in raw)
        return [r.strip() for r in str(raw).split(',') if r.strip()]

    def validate(self) -> bool:
        """
        Валідація конфігурації.

        Returns:
            True якщо конфігурація валідна
        """
        for section in ('tags', 'alerts'):
            if section not in self.config:
                raise ValueError(f"Відсутня обов'язкова секція: {section}")

        tags = self.get_tags()
        if not tags:
            raise ValueError("Повинен бути вказаний хоча б один тег")

        seen = set()
        for tag in tags:
            uuid = tag.get('uuid') if isinstance(tag, dict) else None
            if not uuid:
                raise ValueError(f"Тег без uuid: {tag}")
            if uuid in seen:
                raise ValueError(f"Дублікат uuid тегу: {uuid}")
            seen.add(uuid)

        alerts = self.get_section('alerts')
        for key in DELAY_KEYS:
            value = alerts.get(key, 0)
            if not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"Некоректна затримка alerts.{key}: {value}")

        policy = self.get_beeper_policy()
        if policy not in BEEPER_POLICIES:
            raise ValueError(
                f"Невідома політика beeper.policy: {policy}. "
                f"Допустимі: {', '.join(BEEPER_POLICIES)}"
            )

        retry_interval = self.get('beeper.retry_interval_seconds', 2)
        if isinstance(retry_interval, bool) or not isinstance(retry_interval, (int, float)) or retry_interval <= 0:
            raise ValueError(f"Некоректний beeper.retry_interval_seconds: {retry_interval}")

        return True

    def reload(self) -> None:
        """Перезавантажити конфігурацію з файлу."""
        self.load_config()
