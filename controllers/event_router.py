"""
Маршрутизація подій тегів у сесії тривог.
"""

import itertools
from typing import Any, Dict, List, Optional

from controllers.alert_session import (
    AlertSession,
    AlertSettings,
    SessionKind,
    SessionRef,
    TeardownReason,
    TimerPurpose,
)
from controllers.beeper_controller import BeeperController
from notifications.notification_dispatcher import NotificationDispatcher
from scheduling.timer_scheduler import TimerScheduler
from tags.base import BaseTag, EventState, TemperatureState
from utils.logger import get_logger


class EventRouter:
    """
    Приймає події тегів і керує реєстрами сесій.

    Реєстри (uuid -> AlertSession) належать тільки маршрутизатору.
    Всі методи викликаються з одного потоку циклу подій.
    """

    def __init__(
        self,
        scheduler: TimerScheduler,
        dispatcher: NotificationDispatcher,
        beeper: BeeperController,
        settings: AlertSettings
    ):
        """
        Args:
            scheduler: Планувальник таймерів
            dispatcher: Диспетчер сповіщень
            beeper: Контролер звукового сигналу
            settings: Затримки сповіщень
        """
        self.scheduler = scheduler
        self.dispatcher = dispatcher
        self.beeper = beeper
        self.settings = settings
        self.logger = get_logger()

        self.motion_sessions: Dict[str, AlertSession] = {}
        self.temperature_sessions: Dict[str, AlertSession] = {}
        self._session_ids = itertools.count(1)
        self.is_shut_down = False

    def _registry(self, kind: SessionKind) -> Dict[str, AlertSession]:
        if kind == SessionKind.MOTION:
            return self.motion_sessions
        return self.temperature_sessions

    def _create_session(self, kind: SessionKind, tag: BaseTag) -> Optional[AlertSession]:
        ref = SessionRef(kind, tag.uuid, next(self._session_ids))
        session = AlertSession(
            ref,
            tag,
            self.settings,
            self.scheduler,
            self.dispatcher,
            self._on_timer,
            beeper=self.beeper if kind == SessionKind.MOTION else None
        )
        try:
            session.start()
        except Exception as e:
            self.logger.error(
                f"Не вдалося запустити сесію {kind.value} для тегу [{tag.uuid}]: {e}", exc_info=True
            )
            session.cancel_notification_timer()
            session.cancel_beeper_timer()
            return None

        # Реєстрація тільки повністю запущеної сесії
        self._registry(kind)[tag.uuid] = session
        self.logger.info(f"Сесію {kind.value} #{ref.session_id} для тегу [{tag.uuid}] створено")
        return session

    def _teardown(self, kind: SessionKind, uuid: str, reason: TeardownReason) -> Optional[str]:
        session = self._registry(kind).pop(uuid, None)
        if session is None:
            return None
        message = session.teardown(reason)
        self.logger.info(
            f"Сесію {kind.value} #{session.ref.session_id} для тегу [{uuid}] завершено ({reason.value})"
        )
        return message

    def _on_timer(self, ref: SessionRef, purpose: TimerPurpose) -> None:
        """Спрацювання таймера: сесія шукається заново за посиланням."""
        session = self._registry(ref.kind).get(ref.uuid)
        if session is None or session.ref.session_id != ref.session_id:
            self.logger.debug(f"Таймер для неактуальної сесії {ref} проігноровано")
            return

        if purpose == TimerPurpose.NOTIFICATION:
            session.on_notification_timer()
        else:
            session.on_beeper_timer()

    # Обробники подій тегів

    def on_open(self, tag: BaseTag) -> None:
        self.logger.info(f"Обробка відкриття тегу [{tag.uuid}]")
        if self.is_shut_down:
            return
        if tag.uuid in self.motion_sessions:
            self.logger.debug(f"Тег [{tag.uuid}] вже має активну сесію руху")
        elif tag.event_state == EventState.DISARMED:
            self.logger.info(f"Тег [{tag.uuid}] знято з охорони, відкриття не відстежується")
        else:
            self._create_session(SessionKind.MOTION, tag)
        self.logger.info(f"Тег [{tag.uuid}] відкрито")

    def on_close(self, tag: BaseTag) -> None:
        self.logger.info(f"Обробка закриття тегу [{tag.uuid}]")
        self._teardown(SessionKind.MOTION, tag.uuid, TeardownReason.CLOSED)
        self.logger.info(f"Тег [{tag.uuid}] закрито")

    def on_update(self, tag: BaseTag) -> None:
        """Зняття з охорони без закриття та вимкнення моніторингу температури."""
        self.logger.info(f"Обробка оновлення тегу [{tag.uuid}]")
        if tag.event_state == EventState.DISARMED:
            self._teardown(SessionKind.MOTION, tag.uuid, TeardownReason.DISARMED)
        if tag.temperature_state == TemperatureState.NOT_MONITORING:
            self._teardown(SessionKind.TEMPERATURE, tag.uuid, TeardownReason.TEMPERATURE_DISARMED)
        self.logger.info(f"Тег [{tag.uuid}] оновлено")

    def on_temperature_cross(self, tag: BaseTag) -> None:
        state = tag.temperature_state
        self.logger.info(f"Обробка зміни температурного стану тегу [{tag.uuid}]: {state.name}")
        if self.is_shut_down:
            return

        if tag.uuid in self.temperature_sessions:
            if state == TemperatureState.NORMAL:
                self._teardown(SessionKind.TEMPERATURE, tag.uuid, TeardownReason.RETURNED_TO_NORMAL)
            elif state == TemperatureState.NOT_MONITORING:
                self._teardown(SessionKind.TEMPERATURE, tag.uuid, TeardownReason.TEMPERATURE_DISARMED)
            # HIGH <-> LOW не оголошується повторно і не скидає час початку
        elif state.out_of_range:
            self._create_session(SessionKind.TEMPERATURE, tag)

    def shutdown(self) -> None:
        """
        Завершити всі сесії при зупинці програми.

        Фінальні повідомлення не відправляються, сигнал вимикається,
        якщо тег його підтвердив.
        """
        if self.is_shut_down:
            return
        self.is_shut_down = True

        for kind in SessionKind:
            for uuid in list(self._registry(kind)):
                self._teardown(kind, uuid, TeardownReason.SHUTDOWN)
        self.logger.info("Всі сесії тривог завершено")

    # Стан для API

    def get_session(self, kind: SessionKind, uuid: str) -> Optional[AlertSession]:
        return self._registry(kind).get(uuid)

    def get_sessions_status(self) -> List[Dict[str, Any]]:
        sessions = list(self.motion_sessions.values()) + list(self.temperature_sessions.values())
        return [session.get_status() for session in sessions]
