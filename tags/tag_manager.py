"""
Менеджер для управління всіма тегами дверей/вікон.
"""

from typing import Any, Dict, List, Optional

from tags.base import BaseTag
from tags.wireless_tag import WirelessTag
from tests.test_tags import TestTag
from utils.config_manager import ConfigManager
from utils.logger import get_logger


class TagManager:
    """Клас для створення тегів з конфігурації та прив'язки їх подій."""

    def __init__(self, config: ConfigManager):
        """
        Ініціалізація менеджера тегів.

        Args:
            config: Об'єкт ConfigManager
        """
        self.config = config
        self.logger = get_logger()
        self.tags: Dict[str, BaseTag] = {}
        self.is_test_mode = config.is_test_mode()
        self._initialize_tags()

    def _initialize_tags(self) -> None:
        """Створити теги з секції tags."""
        api_config = self.config.get_section('wireless_tag')

        for tag_config in self.config.get_tags():
            uuid = str(tag_config.get('uuid'))
            name = tag_config.get('name', uuid)
            tag_type = str(tag_config.get('type', 'wireless_tag')).lower()

            if self.is_test_mode or tag_type == 'simulated':
                tag = TestTag(uuid, name, tag_config)
            elif tag_type == 'wireless_tag':
                tag = WirelessTag(uuid, name, tag_config, api_config)
            else:
                self.logger.error(f"Невідомий тип тегу {tag_type} для {uuid}, пропускаю")
                continue

            self.tags[uuid] = tag
            self.logger.info(f"Тег {uuid} ({name}) ініціалізовано як {tag.__class__.__name__}")

    def bind(self, router: Any) -> None:
        """
        Прив'язати події всіх тегів до обробників маршрутизатора.

        Args:
            router: Об'єкт з методами on_open, on_close, on_update, on_temperature_cross
        """
        for tag in self.tags.values():
            tag.opened = router.on_open
            tag.closed = router.on_close
            tag.updated = router.on_update
            tag.temperature_cross = router.on_temperature_cross
        self.logger.info(f"Обробники подій прив'язано до {len(self.tags)} тег(ів)")

    def get_tag(self, uuid: str) -> Optional[BaseTag]:
        """Отримати тег за uuid."""
        return self.tags.get(uuid)

    def get_all_status(self) -> List[Dict[str, Any]]:
        """Отримати статуси всіх тегів."""
        return [tag.get_status() for tag in self.tags.values()]
