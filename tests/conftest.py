"""
Спільні фікстури для тестів.
"""

import pytest
import yaml

from controllers.alert_session import AlertSettings
from controllers.beeper_controller import BeeperController, BeeperPolicy
from controllers.event_router import EventRouter
from notifications.notification_dispatcher import NotificationDispatcher
from scheduling.timer_scheduler import TimerScheduler
from tests.helpers import MINUTE, FakeClock, RecordingChannel
from tests.test_tags import TestTag
from utils.config_manager import ConfigManager


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return TimerScheduler(clock)


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def dispatcher(channel):
    return NotificationDispatcher([channel])


@pytest.fixture
def make_router(scheduler, dispatcher):
    """Фабрика EventRouter з затримками у хвилинах."""
    def _make(policy=BeeperPolicy.OFF, initial=5, temperature=2, repeat=10, retry_interval=2.0):
        settings = AlertSettings(
            initial_delay=initial * MINUTE,
            initial_temperature_delay=temperature * MINUTE,
            repeat_delay=repeat * MINUTE,
        )
        beeper = BeeperController(policy, retry_interval=retry_interval)
        return EventRouter(scheduler, dispatcher, beeper, settings)
    return _make


@pytest.fixture
def make_tag():
    def _make(uuid='S1', name='Front door', **config):
        return TestTag(uuid, name, config)
    return _make


@pytest.fixture
def write_config(tmp_path):
    """Записати словник у YAML і завантажити через ConfigManager."""
    def _write(data, filename='config.yaml'):
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding='utf-8')
        return ConfigManager(str(path))
    return _write


@pytest.fixture
def base_config_data(tmp_path):
    return {
        'tags': [
            {'uuid': 'S1', 'name': 'Front door', 'type': 'simulated'},
            {'uuid': 'S2', 'name': 'Garage window', 'type': 'simulated'},
        ],
        'alerts': {
            'initial_delay_minutes': 5,
            'initial_temperature_delay_minutes': 2,
            'repeat_delay_minutes': 10,
        },
        'beeper': {'policy': 'off'},
        'api': {'enabled': False},
        'logging': {'log_file': str(tmp_path / 'logs' / 'door_alert.log')},
    }
