"""
Модуль керування звуковим сигналом тегу під час тривоги.
"""

from enum import Enum
from typing import Any, Optional

from controllers.alert_session import AlertSession, TeardownReason, TimerPurpose
from tags.base import BaseTag
from utils.config_manager import ConfigManager
from utils.logger import get_logger

DEFAULT_RETRY_INTERVAL = 2.0
DEFAULT_CONTINUOUS_PATTERN = 1000
DEFAULT_BRIEF_PATTERN = 5


class BeeperPolicy(str, Enum):
    """Коли вмикати сигнал тегу."""
    OFF = 'off'
    ON_AFTER_DELAY = 'on_after_delay'
    ON_IMMEDIATELY = 'on_immediately'
    ON_BRIEFLY_ON_OPEN_AND_CLOSE = 'on_briefly_on_open_and_close'

    @property
    def continuous(self) -> bool:
        return self in (BeeperPolicy.ON_AFTER_DELAY, BeeperPolicy.ON_IMMEDIATELY)


class BeeperController:
    """
    Керує сигналом тегу для сесій руху.

    Для безперервних політик сесія має або таймер повтору (сигнал ще не
    підтверджено), або beeper_engaged=True, але ніколи обидва одночасно.
    """

    def __init__(
        self,
        policy: BeeperPolicy = BeeperPolicy.OFF,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        continuous_pattern: int = DEFAULT_CONTINUOUS_PATTERN,
        brief_pattern: int = DEFAULT_BRIEF_PATTERN
    ):
        if retry_interval <= 0:
            raise ValueError(f"Інтервал повтору сигналу повинен бути додатним: {retry_interval}")
        self.policy = BeeperPolicy(policy)
        self.retry_interval = retry_interval
        self.continuous_pattern = continuous_pattern
        self.brief_pattern = brief_pattern
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: ConfigManager) -> 'BeeperController':
        beeper = config.get_section('beeper')
        return cls(
            policy=BeeperPolicy(config.get_beeper_policy()),
            retry_interval=float(beeper.get('retry_interval_seconds', DEFAULT_RETRY_INTERVAL)),
            continuous_pattern=beeper.get('continuous_pattern', DEFAULT_CONTINUOUS_PATTERN),
            brief_pattern=beeper.get('brief_pattern', DEFAULT_BRIEF_PATTERN),
        )

    def _beep(self, tag: BaseTag, pattern: int) -> bool:
        """Спробувати увімкнути сигнал. Помилка - це просто невдала спроба."""
        try:
            result: Optional[Any] = tag.beep(pattern)
        except Exception as e:
            self.logger.debug(f"Тег [{tag.uuid}] відхилив сигнал: {e}")
            return False
        return result is not None and result is not False

    def _stop(self, tag: BaseTag) -> None:
        try:
            if not tag.stop_beep():
                self.logger.warning(f"Тег [{tag.uuid}] не підтвердив вимкнення сигналу")
        except Exception as e:
            self.logger.warning(f"Помилка вимкнення сигналу тегу [{tag.uuid}]: {e}")

    def _try_engage(self, session: AlertSession) -> bool:
        if not self._beep(session.tag, self.continuous_pattern):
            return False
        session.cancel_beeper_timer()
        session.beeper_engaged = True
        self.logger.info(f"Сигнал тегу [{session.uuid}] увімкнено")
        return True

    def _schedule_retry(self, session: AlertSession) -> None:
        session.cancel_beeper_timer()
        session.beeper_timer = session.schedule(self.retry_interval, TimerPurpose.BEEPER, repeating=True)
        self.logger.info(
            f"Тег [{session.uuid}] зайнятий, повтор сигналу кожні {self.retry_interval}с"
        )

    def on_session_started(self, session: AlertSession) -> None:
        """Дія при створенні сесії руху."""
        if self.policy == BeeperPolicy.ON_BRIEFLY_ON_OPEN_AND_CLOSE:
            self._beep(session.tag, self.brief_pattern)
        elif self.policy == BeeperPolicy.ON_IMMEDIATELY:
            if not self._try_engage(session):
                self._schedule_retry(session)
        elif self.policy == BeeperPolicy.ON_AFTER_DELAY:
            session.beeper_timer = session.schedule(session.initial_delay, TimerPurpose.BEEPER)

    def on_beeper_timer(self, session: AlertSession) -> None:
        """Спрацював таймер затримки або повтору сигналу."""
        if not self.policy.continuous:
            return
        if session.beeper_engaged:
            session.cancel_beeper_timer()
            return
        if self._try_engage(session):
            return
        if session.beeper_timer is None or not session.beeper_timer.repeating:
            self._schedule_retry(session)

    def on_session_teardown(self, session: AlertSession, reason: TeardownReason) -> None:
        """Вимкнути сигнал або скасувати повтор при завершенні сесії."""
        if self.policy.continuous:
            if session.beeper_engaged:
                self._stop(session.tag)
                session.beeper_engaged = False
            elif session.beeper_timer is not None:
                session.cancel_beeper_timer()
        elif self.policy == BeeperPolicy.ON_BRIEFLY_ON_OPEN_AND_CLOSE and reason == TeardownReason.CLOSED:
            self._beep(session.tag, self.brief_pattern)
