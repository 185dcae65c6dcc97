"""
Сесія тривоги одного тегу: затримка, повторні сповіщення, завершення.
"""

from collections import namedtuple
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from scheduling.timer_scheduler import TimerHandle, TimerScheduler
from notifications.notification_dispatcher import NotificationDispatcher
from tags.base import BaseTag, TemperatureState
from utils.config_manager import ConfigManager
from utils.duration import SECONDS_PER_MINUTE, ceil_minutes, format_minutes, round_minutes
from utils.logger import get_logger

LESS_THAN_A_MINUTE = "less than 1 minute"


class SessionKind(str, Enum):
    """Тип тривоги, яку відстежує сесія."""
    MOTION = 'motion'
    TEMPERATURE = 'temperature'


class SessionState(Enum):
    """Стани сесії."""
    CREATED = 'created'
    AWAITING_INITIAL = 'awaiting_initial'
    NOTIFIED = 'notified'
    REPEATING = 'repeating'
    TORN_DOWN = 'torn_down'


class TimerPurpose(Enum):
    """Призначення таймера сесії."""
    NOTIFICATION = 'notification'
    BEEPER = 'beeper'


class TeardownReason(Enum):
    """Причина завершення сесії."""
    CLOSED = 'closed'
    DISARMED = 'disarmed'
    RETURNED_TO_NORMAL = 'returned_to_normal'
    TEMPERATURE_DISARMED = 'temperature_disarmed'
    SHUTDOWN = 'shutdown'


# Стабільне посилання на сесію для таймерів: (тип, uuid тегу, номер сесії)
SessionRef = namedtuple('SessionRef', ['kind', 'uuid', 'session_id'])

TimerCallback = Callable[[SessionRef, TimerPurpose], None]


@dataclass(frozen=True)
class AlertSettings:
    """Затримки сповіщень у секундах."""
    initial_delay: float
    initial_temperature_delay: float
    repeat_delay: float

    @classmethod
    def from_config(cls, config: ConfigManager) -> 'AlertSettings':
        alerts = config.get_section('alerts')
        return cls(
            initial_delay=float(alerts.get('initial_delay_minutes', 5)) * SECONDS_PER_MINUTE,
            initial_temperature_delay=float(
                alerts.get('initial_temperature_delay_minutes', alerts.get('initial_delay_minutes', 5))
            ) * SECONDS_PER_MINUTE,
            repeat_delay=float(alerts.get('repeat_delay_minutes', 0)) * SECONDS_PER_MINUTE,
        )


class AlertSession:
    """
    Стан тривоги одного тегу.

    Переходи: CREATED -> AWAITING_INITIAL -> NOTIFIED/REPEATING -> TORN_DOWN.
    Таймери сесії викликають timer_callback з SessionRef, а не з самою
    сесією; маршрутизатор знаходить актуальну сесію в момент спрацювання.
    """

    def __init__(
        self,
        ref: SessionRef,
        tag: BaseTag,
        settings: AlertSettings,
        scheduler: TimerScheduler,
        dispatcher: NotificationDispatcher,
        timer_callback: TimerCallback,
        beeper: Optional[Any] = None
    ):
        self.ref = ref
        self.tag = tag
        self.settings = settings
        self.scheduler = scheduler
        self.dispatcher = dispatcher
        self.timer_callback = timer_callback
        self.beeper = beeper
        self.logger = get_logger()

        self.state = SessionState.CREATED
        self.trigger_tick = scheduler.now()
        self.notification_timer: Optional[TimerHandle] = None
        self.beeper_timer: Optional[TimerHandle] = None
        self.beeper_engaged = False
        self.notifications_sent = 0
        self.trigger_temperature_state = tag.temperature_state

    @property
    def kind(self) -> SessionKind:
        return self.ref.kind

    @property
    def uuid(self) -> str:
        return self.ref.uuid

    @property
    def awaiting_initial_notification(self) -> bool:
        return self.state in (SessionState.CREATED, SessionState.AWAITING_INITIAL)

    @property
    def initial_delay(self) -> float:
        if self.kind == SessionKind.TEMPERATURE:
            return self.settings.initial_temperature_delay
        return self.settings.initial_delay

    # Таймери

    def schedule(self, delay: float, purpose: TimerPurpose, repeating: bool = False) -> TimerHandle:
        """Запланувати таймер сесії з указаним призначенням."""
        if repeating:
            handle = self.scheduler.schedule_repeating(delay, self.timer_callback, self.ref, purpose)
        else:
            handle = self.scheduler.schedule_once(delay, self.timer_callback, self.ref, purpose)
        self.logger.info(
            f"Запущено таймер [{handle.timer_id}] ({purpose.value}) для тегу [{self.uuid}]"
        )
        return handle

    def cancel_notification_timer(self) -> None:
        if self.notification_timer is not None:
            self.logger.info(f"Зупинка таймера [{self.notification_timer.timer_id}]")
            self.scheduler.cancel(self.notification_timer)
            self.notification_timer = None

    def cancel_beeper_timer(self) -> None:
        if self.beeper_timer is not None:
            self.logger.info(f"Зупинка таймера сигналу [{self.beeper_timer.timer_id}]")
            self.scheduler.cancel(self.beeper_timer)
            self.beeper_timer = None

    # Тривалість

    def elapsed_seconds(self) -> float:
        return self.scheduler.now() - self.trigger_tick

    def elapsed_minutes(self) -> int:
        """Рух округлюється вгору, температура - до найближчої хвилини."""
        if self.kind == SessionKind.MOTION:
            return ceil_minutes(self.elapsed_seconds())
        return round_minutes(self.elapsed_seconds())

    def duration_text(self) -> str:
        if self.kind == SessionKind.MOTION:
            return format_minutes(self.elapsed_minutes())
        return format_minutes(self.elapsed_minutes(), LESS_THAN_A_MINUTE)

    # Повідомлення

    def _temperature_direction(self) -> str:
        state = self.tag.temperature_state
        if not state.out_of_range:
            state = self.trigger_temperature_state
        return "too low" if state == TemperatureState.LOW else "too high"

    def alert_message(self) -> str:
        if self.kind == SessionKind.MOTION:
            return f"{self.tag.name} open for {self.duration_text()}."
        return f"{self.tag.name} temperature {self._temperature_direction()} for {self.duration_text()}."

    def resolution_message(self, reason: TeardownReason) -> Optional[str]:
        name = self.tag.name
        duration = self.duration_text()
        if reason == TeardownReason.CLOSED:
            return f"{name} closed after being open for {duration}."
        if reason == TeardownReason.DISARMED:
            return f"{name} disarmed after being open for {duration}."
        if reason == TeardownReason.RETURNED_TO_NORMAL:
            return f"{name} temperature returned to normal after {duration}."
        if reason == TeardownReason.TEMPERATURE_DISARMED:
            return f"{name} temperature monitoring disarmed after being out of range for {duration}."
        return None

    def _notify(self, message: str) -> None:
        self.dispatcher.notify(self.tag.name, message, self.kind.value)

    # Переходи

    def start(self) -> None:
        """Запланувати перше сповіщення та дію звукового сигналу."""
        if self.state != SessionState.CREATED:
            return
        self.notification_timer = self.schedule(self.initial_delay, TimerPurpose.NOTIFICATION)
        self.state = SessionState.AWAITING_INITIAL
        if self.beeper is not None:
            self.beeper.on_session_started(self)

    def on_notification_timer(self) -> None:
        """Обробити спрацювання таймера сповіщень."""
        if self.state == SessionState.TORN_DOWN:
            return

        timer = self.notification_timer
        self.logger.info(
            f"Обробка таймера [{timer.timer_id if timer else '-'}] для тегу [{self.uuid}]"
        )

        if self.awaiting_initial_notification:
            self.cancel_notification_timer()
            if self.settings.repeat_delay > 0:
                self.notification_timer = self.schedule(
                    self.settings.repeat_delay, TimerPurpose.NOTIFICATION, repeating=True
                )
                self.state = SessionState.REPEATING
            else:
                self.state = SessionState.NOTIFIED

        self.notifications_sent += 1
        self._notify(self.alert_message())

    def on_beeper_timer(self) -> None:
        if self.state != SessionState.TORN_DOWN and self.beeper is not None:
            self.beeper.on_beeper_timer(self)

    def teardown(self, reason: TeardownReason) -> Optional[str]:
        """
        Завершити сесію: зупинити таймери, вирішити стан сигналу,
        і, якщо вже було хоча б одне сповіщення, повідомити про завершення.

        Returns:
            Текст фінального повідомлення або None
        """
        if self.state == SessionState.TORN_DOWN:
            return None

        was_awaiting = self.awaiting_initial_notification
        self.cancel_notification_timer()
        if self.beeper is not None:
            self.beeper.on_session_teardown(self, reason)
        self.cancel_beeper_timer()
        self.state = SessionState.TORN_DOWN

        if was_awaiting or reason == TeardownReason.SHUTDOWN:
            return None

        message = self.resolution_message(reason)
        if message:
            self._notify(message)
        return message

    def get_status(self) -> Dict[str, Any]:
        """Знімок стану сесії для API."""
        return {
            'kind': self.kind.value,
            'uuid': self.uuid,
            'name': self.tag.name,
            'session_id': self.ref.session_id,
            'state': self.state.value,
            'elapsed_seconds': round(self.elapsed_seconds(), 1),
            'notifications_sent': self.notifications_sent,
            'beeper_engaged': self.beeper_engaged,
            'beeper_retry_pending': self.beeper_timer is not None,
        }
