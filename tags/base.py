"""
Базовий клас для тегів дверей/вікон.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Optional


class EventState(IntEnum):
    """Стан охорони тегу."""
    DISARMED = 0
    ARMED = 1

    @classmethod
    def parse(cls, value: Any) -> 'EventState':
        """Перетворити сире значення (число або назву) на EventState."""
        return _parse_enum(cls, value)


class TemperatureState(IntEnum):
    """Стан моніторингу температури тегу."""
    NOT_MONITORING = 0
    NORMAL = 1
    HIGH = 2
    LOW = 3

    @classmethod
    def parse(cls, value: Any) -> 'TemperatureState':
        """Перетворити сире значення (число або назву) на TemperatureState."""
        return _parse_enum(cls, value)

    @property
    def out_of_range(self) -> bool:
        return self in (TemperatureState.HIGH, TemperatureState.LOW)


class TagEvent(str, Enum):
    """Події, які піднімає тег."""
    OPENED = 'opened'
    CLOSED = 'closed'
    UPDATED = 'updated'
    TEMPERATURE_CROSS = 'temperature_cross'


def _parse_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Некоректне значення {enum_cls.__name__}: {value!r}")
    if isinstance(value, int):
        return enum_cls(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip('-').isdigit():
            return enum_cls(int(text))
        try:
            return enum_cls[text.upper()]
        except KeyError:
            pass
    raise ValueError(f"Некоректне значення {enum_cls.__name__}: {value!r}")


TagCallback = Callable[['BaseTag'], None]


class BaseTag(ABC):
    """Абстрактний базовий клас для всіх тегів."""

    def __init__(self, uuid: str, name: str, config: Dict[str, Any]):
        """
        Ініціалізація базового тегу.

        Args:
            uuid: Стабільний ідентифікатор тегу
            name: Назва для повідомлень
            config: Конфігурація тегу
        """
        if not uuid:
            raise ValueError("Тег повинен мати uuid")
        self.uuid = str(uuid)
        self.name = name or self.uuid
        self.config = config
        self.event_state = EventState.parse(config.get('event_state', EventState.ARMED))
        self.temperature_state = TemperatureState.parse(
            config.get('temperature_state', TemperatureState.NOT_MONITORING)
        )
        self.last_event: Optional[TagEvent] = None
        self.last_update: Optional[datetime] = None

        # Обробники подій (призначає TagManager)
        self.opened: Optional[TagCallback] = None
        self.closed: Optional[TagCallback] = None
        self.updated: Optional[TagCallback] = None
        self.temperature_cross: Optional[TagCallback] = None

    @abstractmethod
    def beep(self, pattern: int) -> Optional[Any]:
        """
        Увімкнути звуковий сигнал на тегу.

        Args:
            pattern: Тривалість або шаблон сигналу

        Returns:
            Непорожній результат при успіху, None/False якщо тег відхилив команду
        """

    @abstractmethod
    def stop_beep(self) -> bool:
        """
        Вимкнути звуковий сигнал.

        Returns:
            True якщо команда виконана
        """

    def apply_event(
        self,
        event: Any,
        event_state: Any = None,
        temperature_state: Any = None
    ) -> TagEvent:
        """
        Оновити стан тегу та підняти відповідну подію.

        Значення перевіряються до будь-яких змін стану тегу.
        """
        tag_event = TagEvent(event)
        new_event_state = EventState.parse(event_state) if event_state is not None else None
        new_temperature_state = (
            TemperatureState.parse(temperature_state) if temperature_state is not None else None
        )

        if new_event_state is not None:
            self.event_state = new_event_state
        if new_temperature_state is not None:
            self.temperature_state = new_temperature_state
        self.last_event = tag_event
        self.last_update = datetime.now()

        callback = {
            TagEvent.OPENED: self.opened,
            TagEvent.CLOSED: self.closed,
            TagEvent.UPDATED: self.updated,
            TagEvent.TEMPERATURE_CROSS: self.temperature_cross,
        }[tag_event]
        if callback is not None:
            callback(self)
        return tag_event

    def get_status(self) -> Dict[str, Any]:
        """Отримати статус тегу."""
        return {
            'uuid': self.uuid,
            'name': self.name,
            'type': self.__class__.__name__,
            'event_state': self.event_state.name.lower(),
            'temperature_state': self.temperature_state.name.lower(),
            'last_event': self.last_event.value if self.last_event else None,
            'last_update': self.last_update.isoformat() if self.last_update else None,
        }
